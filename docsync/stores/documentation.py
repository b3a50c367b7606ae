"""Persistent store of generated documentation artifacts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import CorruptStoreError, IOFailure, NotFoundError
from ..logging import get_logger
from ..models import DOCUMENTATION_VERSION, DocumentationArtifact, ProjectDocumentation, utc_timestamp
from .atomic import write_json_atomic

DEFAULT_DOCS_PATH = Path(".docsync") / "docs.json"


class DocumentationCache:
    """Maps workspace-relative paths to their most recent documentation artifact."""

    def __init__(self, workspace_root: Path, path: Path | None = None) -> None:
        self.root = Path(workspace_root).resolve()
        self.path = path or self.root / DEFAULT_DOCS_PATH
        self.logger = get_logger("stores.documentation")
        self._doc: Optional[ProjectDocumentation] = None

    @property
    def documentation(self) -> ProjectDocumentation:
        if self._doc is None:
            self._doc = self.load_all()
        return self._doc

    def get(self, path: str) -> Optional[DocumentationArtifact]:
        return self.documentation.files.get(path)

    def put(self, path: str, artifact: DocumentationArtifact) -> None:
        self.documentation.files[path] = artifact

    def load_all(self) -> ProjectDocumentation:
        """Load the aggregate from disk; a missing store yields an empty one."""
        try:
            doc = self.read()
        except NotFoundError:
            self.logger.debug("No documentation store at %s; starting empty", self.path)
            doc = ProjectDocumentation()
        self._doc = doc
        return doc

    def read(self) -> ProjectDocumentation:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(f"No documentation store at {self.path}") from exc
        except OSError as exc:
            raise IOFailure(f"Unable to read documentation store {self.path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptStoreError(f"Documentation store {self.path} is not valid JSON: {exc}") from exc
        return _documentation_from_dict(data, self.path)

    def persist(self, doc: ProjectDocumentation | None = None) -> None:
        if doc is not None:
            self._doc = doc
        target = self.documentation
        target.last_updated = utc_timestamp()
        write_json_atomic(self.path, _documentation_to_dict(target))

    def discard(self) -> None:
        """Drop in-memory state so the next read reloads from disk."""
        self._doc = None


def _artifact_to_dict(artifact: DocumentationArtifact) -> Dict[str, Any]:
    return {
        "path": artifact.path,
        "content": artifact.content,
        "summary": artifact.summary,
        "type": artifact.type,
        "lastUpdated": artifact.last_updated,
        "hash": artifact.hash,
    }


def _documentation_to_dict(doc: ProjectDocumentation) -> Dict[str, Any]:
    return {
        "version": doc.version,
        "lastUpdated": doc.last_updated,
        "files": {key: _artifact_to_dict(artifact) for key, artifact in doc.files.items()},
    }


def _documentation_from_dict(data: Any, source: Path) -> ProjectDocumentation:
    if not isinstance(data, dict) or not isinstance(data.get("files"), dict):
        raise CorruptStoreError(f"Documentation store {source} is missing its files mapping")

    files: Dict[str, DocumentationArtifact] = {}
    for key, raw in data["files"].items():
        if not isinstance(raw, dict):
            raise CorruptStoreError(f"Documentation store {source} has a malformed entry for {key!r}")
        content = raw.get("content")
        summary = raw.get("summary")
        if not isinstance(content, str) or not isinstance(summary, str):
            raise CorruptStoreError(f"Documentation store {source} has a malformed entry for {key!r}")
        file_hash = raw.get("hash")
        files[key] = DocumentationArtifact(
            path=str(raw.get("path") or key),
            content=content,
            summary=summary,
            type=str(raw.get("type") or "Unknown"),
            last_updated=str(raw.get("lastUpdated") or utc_timestamp()),
            hash=file_hash if isinstance(file_hash, str) else None,
        )

    return ProjectDocumentation(
        version=str(data.get("version") or DOCUMENTATION_VERSION),
        last_updated=str(data.get("lastUpdated") or utc_timestamp()),
        files=files,
    )


__all__ = ["DEFAULT_DOCS_PATH", "DocumentationCache"]
