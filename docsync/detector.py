"""Staleness decisions for candidate files."""

from __future__ import annotations

from typing import Optional

from .hashing import hash_content
from .models import FileRecord, Snapshot
from .stores.snapshot import TreeSnapshotStore

NEW = "new"
UNCHANGED = "unchanged"
MODIFIED = "modified"


def classify(record: Optional[FileRecord], current_content: str) -> str:
    if record is None:
        return NEW
    if hash_content(current_content) == record.file_hash:
        return UNCHANGED
    return MODIFIED


class ChangeDetector:
    """Compares current file content against the snapshot's recorded hash."""

    def __init__(self, store: TreeSnapshotStore) -> None:
        self.store = store

    def classify(self, file_path: str, current_content: str, snapshot: Optional[Snapshot]) -> str:
        if snapshot is None:
            return NEW
        return classify(self.store.find_record(snapshot, file_path), current_content)

    def is_stale(self, file_path: str, current_content: str, snapshot: Optional[Snapshot]) -> bool:
        """Return True when the file was never documented or its content changed.

        A ``None`` snapshot stands for a first run, where every file is stale.
        """
        return self.classify(file_path, current_content, snapshot) != UNCHANGED


__all__ = ["ChangeDetector", "MODIFIED", "NEW", "UNCHANGED", "classify"]
