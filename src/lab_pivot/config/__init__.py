# ============================================================================
# src/lab_pivot/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .base_config import StorageSettings, storage_settings
from .logging_config import LoggingSettings, logging_settings

__all__ = [
    "StorageSettings",
    "storage_settings",
    "LoggingSettings",
    "logging_settings",
]
