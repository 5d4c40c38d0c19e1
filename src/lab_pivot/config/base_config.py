# ============================================================================
# src/lab_pivot/config/base_config.py
# ============================================================================
"""
Storage Configuration
- SQLite database location for lab results and pivot tables
- Connection timeout
"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LAB_PIVOT_DB_PATH: Path = Field(
        default=Path("data/lab_pivot.db"),
        description="SQLite database holding documents, lab results and pivot tables"
    )

    SQLITE_TIMEOUT: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for a locked database before failing"
    )

    def create_directories(self):
        """Create the database directory if it doesn't exist"""
        self.LAB_PIVOT_DB_PATH.parent.mkdir(parents=True, exist_ok=True)


# Global instance
storage_settings = StorageSettings()
