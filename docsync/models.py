"""Core data models shared across docsync components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

SNAPSHOT_VERSION = 1
DOCUMENTATION_VERSION = "1.0"


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class FileType(str, Enum):
    """Source flavours the prompt template knows how to document."""

    TYPESCRIPT = "TypeScript"
    TSX = "TSX"
    JAVASCRIPT = "JavaScript"
    JSX = "JSX"
    PYTHON = "Python"
    UNKNOWN = "Unknown"


@dataclass
class FileRecord:
    """Last-known state of a tracked file inside the snapshot."""

    path: str
    file_hash: str
    language: Optional[str] = None
    symbols: List[str] = field(default_factory=list)


@dataclass
class TreeNode:
    """Directory structure entry used by browsing front-ends."""

    name: str
    path: str
    type: str
    children: List["TreeNode"] = field(default_factory=list)
    language: Optional[str] = None
    symbols: List[str] = field(default_factory=list)

    @property
    def is_dir(self) -> bool:
        return self.type == "directory"

    def iter_files(self):  # type: ignore[no-untyped-def]
        """Yield file nodes depth-first in traversal order."""
        if not self.is_dir:
            yield self
            return
        for child in self.children:
            yield from child.iter_files()


@dataclass
class Snapshot:
    """Persisted record of last-known content hashes per tracked file."""

    root: str
    records: Dict[str, FileRecord] = field(default_factory=dict)
    tree: Optional[TreeNode] = None
    generated_at: Optional[str] = None
    version: int = SNAPSHOT_VERSION


@dataclass
class DocumentationArtifact:
    """Generated summary/content bundle for one file."""

    path: str
    content: str
    summary: str
    type: str
    last_updated: str = field(default_factory=utc_timestamp)
    hash: Optional[str] = None


@dataclass
class ProjectDocumentation:
    """Aggregate of every documented file in the workspace."""

    version: str = DOCUMENTATION_VERSION
    last_updated: str = field(default_factory=utc_timestamp)
    files: Dict[str, DocumentationArtifact] = field(default_factory=dict)


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of processing a single candidate file."""

    SKIPPED = "skipped"
    GENERATED = "generated"
    FAILED = "failed"

    path: str
    status: str
    artifact: Optional[DocumentationArtifact] = None
    reason: Optional[str] = None

    @classmethod
    def skipped(cls, path: str) -> "GenerationResult":
        return cls(path=path, status=cls.SKIPPED)

    @classmethod
    def generated(cls, path: str, artifact: DocumentationArtifact) -> "GenerationResult":
        return cls(path=path, status=cls.GENERATED, artifact=artifact)

    @classmethod
    def failed(cls, path: str, reason: str) -> "GenerationResult":
        return cls(path=path, status=cls.FAILED, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"path": self.path, "status": self.status}
        if self.reason is not None:
            payload["reason"] = self.reason
        if self.artifact is not None:
            payload["summary"] = self.artifact.summary
        return payload


@dataclass
class BatchReport:
    """Aggregated results of a batch run, in processing order."""

    results: List[GenerationResult] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def generated(self) -> int:
        return self._count(GenerationResult.GENERATED)

    @property
    def skipped(self) -> int:
        return self._count(GenerationResult.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(GenerationResult.FAILED)

    @property
    def succeeded(self) -> int:
        return self.generated

    def summary_line(self) -> str:
        return (
            f"{len(self.results)} file(s) processed: {self.generated} generated, "
            f"{self.skipped} skipped, {self.failed} failed"
        )
