# src/lab_pivot/storage/__init__.py

from .base import LabSession, LabStore
from .locks import OwnerLockRegistry
from .sqlite_store import SqliteLabSession, SqliteLabStore

__all__ = [
    "LabSession",
    "LabStore",
    "OwnerLockRegistry",
    "SqliteLabSession",
    "SqliteLabStore",
]
