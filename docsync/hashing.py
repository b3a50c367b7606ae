"""Content fingerprints used for change detection."""

from __future__ import annotations

import hashlib
from pathlib import Path


def hash_content(content: str) -> str:
    """Return the SHA-256 hex digest of ``content`` encoded as UTF-8."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def hash_file(path: Path) -> str:
    """Hash a file's decoded text so the result matches :func:`hash_content`."""
    return hash_content(read_text(path))


def read_text(path: Path) -> str:
    # newline="" keeps CRLF files byte-faithful so hashes survive a round trip.
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


__all__ = ["hash_content", "hash_file", "read_text"]
