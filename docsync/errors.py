"""Error taxonomy shared by the docsync stores and pipeline."""

from __future__ import annotations


class DocSyncError(RuntimeError):
    """Base class for docsync failures."""


class NotFoundError(DocSyncError):
    """Raised when a durable store has not been created yet.

    Callers treat this as "no prior state" rather than a failure.
    """


class CorruptSnapshotError(DocSyncError):
    """Raised when the tree snapshot exists but cannot be parsed."""


class CorruptStoreError(DocSyncError):
    """Raised when the documentation store exists but cannot be parsed."""


class GenerationFailure(DocSyncError):
    """Raised when the text-generation collaborator fails or returns nothing usable."""


class IOFailure(DocSyncError):
    """Raised when a tracked file or durable store cannot be read or written."""


class MissingCredentialsError(DocSyncError):
    """Raised when the configured provider needs an API key and none is available."""


class LockedError(DocSyncError):
    """Raised when another process holds the workspace write lock."""


__all__ = [
    "CorruptSnapshotError",
    "CorruptStoreError",
    "DocSyncError",
    "GenerationFailure",
    "IOFailure",
    "LockedError",
    "MissingCredentialsError",
    "NotFoundError",
]
