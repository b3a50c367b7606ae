"""Tests for docsync.stores.lock."""

from __future__ import annotations

from pathlib import Path

import pytest

from docsync.errors import LockedError
from docsync.stores.lock import WorkspaceLock


def test_second_holder_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / ".docsync" / "lock"
    first = WorkspaceLock(path)
    second = WorkspaceLock(path)

    with first:
        assert first.held
        with pytest.raises(LockedError):
            second.acquire()
    assert not first.held

    with second:
        assert second.held


def test_lock_is_reentrant_for_the_same_instance(tmp_path: Path) -> None:
    lock = WorkspaceLock(tmp_path / "lock")

    with lock:
        with lock:
            assert lock.held
        assert lock.held
    assert not lock.held
