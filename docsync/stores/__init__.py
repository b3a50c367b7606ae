"""Durable stores for snapshot and documentation state."""

from .documentation import DocumentationCache
from .lock import WorkspaceLock
from .snapshot import TreeSnapshotStore

__all__ = ["DocumentationCache", "TreeSnapshotStore", "WorkspaceLock"]
