# ============================================================================
# src/lab_pivot/storage/locks.py
# ============================================================================
"""
In-process per-owner locking

Serializes pivot mutations of one owner across threads of one process.
Writers in other processes are kept apart by the store's version check.
"""

import threading
from contextlib import contextmanager
from typing import Dict


class OwnerLockRegistry:
    """
    Lazily created threading.Lock per owner id.

    Locks are never evicted: the registry grows by one entry per owner seen
    and is meant to live as long as the process.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, owner_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(owner_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[owner_id] = lock
            return lock

    @contextmanager
    def hold(self, owner_id: str):
        lock = self.lock_for(owner_id)
        with lock:
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
