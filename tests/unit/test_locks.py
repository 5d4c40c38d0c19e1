# ============================================================================
# FILE: tests/unit/test_locks.py
# ============================================================================
"""
Unit tests for the per-owner lock registry
"""

import threading
import time

from lab_pivot.storage.locks import OwnerLockRegistry


def test_same_owner_same_lock():
    registry = OwnerLockRegistry()

    assert registry.lock_for("user-1") is registry.lock_for("user-1")
    assert registry.lock_for("user-1") is not registry.lock_for("user-2")
    assert len(registry) == 2


def test_hold_releases_on_error():
    registry = OwnerLockRegistry()

    try:
        with registry.hold("user-1"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert not registry.lock_for("user-1").locked()


def test_same_owner_mutations_are_serialized():
    """Test two threads holding one owner's lock never overlap"""
    registry = OwnerLockRegistry()
    active = []
    overlaps = []

    def work():
        for _ in range(20):
            with registry.hold("user-1"):
                active.append(1)
                if len(active) > 1:
                    overlaps.append(True)
                time.sleep(0.0005)
                active.pop()

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []


def test_different_owners_are_independent():
    registry = OwnerLockRegistry()

    with registry.hold("user-1"):
        acquired = registry.lock_for("user-2").acquire(blocking=False)

    assert acquired is True
    registry.lock_for("user-2").release()


def test_lock_kept_after_release():
    """Test an owner's lock survives release and is reused"""
    registry = OwnerLockRegistry()

    with registry.hold("user-1"):
        first = registry.lock_for("user-1")
    with registry.hold("user-2"):
        pass

    assert registry.lock_for("user-1") is first
    assert len(registry) == 2
