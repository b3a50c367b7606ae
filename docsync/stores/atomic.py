"""Crash-safe JSON persistence helpers shared by the durable stores."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from ..errors import IOFailure


def write_json_atomic(path: Path, payload: Any) -> None:
    """Write ``payload`` as JSON via a sibling temp file and an atomic rename.

    Readers observe either the previous document or the new one, never a
    truncated file.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise IOFailure(f"Unable to prepare {path}: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)
            handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise IOFailure(f"Unable to write {path}: {exc}") from exc


def write_text_atomic(path: Path, text: str) -> None:
    """Replace a text file's content through the same temp-then-rename discipline."""
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise IOFailure(f"Unable to prepare {path}: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode)
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise IOFailure(f"Unable to write {path}: {exc}") from exc


__all__ = ["write_json_atomic", "write_text_atomic"]
