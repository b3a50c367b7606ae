"""Persistent tree snapshot mapping tracked files to their last documented hash."""

from __future__ import annotations

import json
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..errors import CorruptSnapshotError, IOFailure, NotFoundError
from ..hashing import hash_file
from ..logging import get_logger
from ..models import SNAPSHOT_VERSION, FileRecord, Snapshot, TreeNode, utc_timestamp
from ..scanner import ScanResult, detect_language
from .atomic import write_json_atomic

DEFAULT_TREE_PATH = Path(".docsync") / "tree.json"


class TreeSnapshotStore:
    """Reads and writes the JSON snapshot under the workspace state directory."""

    def __init__(self, workspace_root: Path, path: Path | None = None) -> None:
        self.root = Path(workspace_root).resolve()
        self.path = path or self.root / DEFAULT_TREE_PATH
        self.logger = get_logger("stores.snapshot")

    # ------------------------------------------------------------------
    # Loading and saving

    def load(self) -> Snapshot:
        """Return the persisted snapshot.

        Raises :class:`NotFoundError` when no snapshot has been written yet and
        :class:`CorruptSnapshotError` when the file exists but cannot be parsed.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(f"No snapshot at {self.path}") from exc
        except OSError as exc:
            raise IOFailure(f"Unable to read snapshot {self.path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptSnapshotError(f"Snapshot {self.path} is not valid JSON: {exc}") from exc
        return _snapshot_from_dict(data, self.path)

    def load_or_empty(self) -> Snapshot:
        try:
            return self.load()
        except NotFoundError:
            self.logger.debug("No snapshot found at %s; starting from an empty one", self.path)
            return Snapshot(root=str(self.root))

    def save(self, snapshot: Snapshot) -> None:
        snapshot.generated_at = utc_timestamp()
        write_json_atomic(self.path, _snapshot_to_dict(snapshot))

    # ------------------------------------------------------------------
    # Lookup and mutation

    def relative_key(self, path: str | Path) -> str:
        """Normalise a caller-supplied path to the workspace-relative record key."""
        candidate = Path(path)
        if candidate.is_absolute():
            try:
                return candidate.resolve().relative_to(self.root).as_posix()
            except ValueError:
                return candidate.as_posix()
        parts = [part for part in PurePosixPath(candidate.as_posix()).parts if part != "."]
        return "/".join(parts)

    def find_record(self, snapshot: Snapshot, path: str | Path) -> Optional[FileRecord]:
        """Exact lookup by record key, falling back to suffix matching.

        Suffix matching accepts either side ending in ``/<other>`` so callers
        passing differently rooted paths still resolve. A key naming an existing
        workspace file only ever matches exactly. When several records match,
        the first in traversal order wins and a warning names them all.
        """
        key = self.relative_key(path)
        record = snapshot.records.get(key)
        if record is not None:
            return record
        if self._is_workspace_file(key):
            return None

        matches = [
            candidate
            for candidate_key, candidate in snapshot.records.items()
            if candidate_key.endswith(f"/{key}") or key.endswith(f"/{candidate_key}")
        ]
        if not matches:
            return None
        if len(matches) > 1:
            self.logger.warning(
                "Ambiguous snapshot lookup for %s; using %s (candidates: %s)",
                key,
                matches[0].path,
                ", ".join(match.path for match in matches),
            )
        return matches[0]

    def _is_workspace_file(self, key: str) -> bool:
        if PurePosixPath(key).is_absolute():
            return False
        return (self.root / key).is_file()

    def update_hashes(self, paths: Iterable[str | Path]) -> Snapshot:
        """Recompute and durably commit the hash of every named file."""
        snapshot = self.load_or_empty()
        for path in paths:
            key = self.relative_key(path)
            absolute = self.root / key
            try:
                file_hash = hash_file(absolute)
            except (OSError, UnicodeDecodeError) as exc:
                raise IOFailure(f"Unable to hash {key}: {exc}") from exc
            record = snapshot.records.get(key)
            if record is None:
                record = FileRecord(path=key, file_hash=file_hash, language=detect_language(key))
                snapshot.records[key] = record
            else:
                record.file_hash = file_hash
            self.logger.debug("Committed hash %s for %s", file_hash[:12], key)
        self.save(snapshot)
        return snapshot

    def refresh_tree(self, scan: ScanResult) -> Snapshot:
        """Replace the structural tree while carrying every recorded hash forward."""
        snapshot = self.load_or_empty()
        nodes: Dict[str, TreeNode] = {node.path: node for node in scan.tree.iter_files()}
        records: Dict[str, FileRecord] = {}
        for key in scan.files:
            record = snapshot.records.get(key)
            if record is None:
                continue
            node = nodes.get(key)
            if node is not None:
                record.language = node.language
                record.symbols = list(node.symbols)
            records[key] = record
        for key, record in snapshot.records.items():
            records.setdefault(key, record)
        snapshot.records = records
        snapshot.tree = scan.tree
        snapshot.root = str(self.root)
        self.save(snapshot)
        return snapshot


# ----------------------------------------------------------------------
# Serialisation


def _snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    return {
        "version": snapshot.version,
        "root": snapshot.root,
        "generated_at": snapshot.generated_at,
        "files": {
            key: {
                "path": record.path,
                "file_hash": record.file_hash,
                "language": record.language,
                "symbols": list(record.symbols),
            }
            for key, record in snapshot.records.items()
        },
        "tree": _node_to_dict(snapshot.tree) if snapshot.tree is not None else None,
    }


def _node_to_dict(node: TreeNode) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"name": node.name, "path": node.path, "type": node.type}
    if node.is_dir:
        payload["children"] = [_node_to_dict(child) for child in node.children]
    else:
        payload["language"] = node.language
        payload["symbols"] = list(node.symbols)
    return payload


def _snapshot_from_dict(data: Any, source: Path) -> Snapshot:
    if not isinstance(data, dict):
        raise CorruptSnapshotError(f"Snapshot {source} must contain a JSON object")
    if data.get("version") != SNAPSHOT_VERSION:
        raise CorruptSnapshotError(
            f"Snapshot {source} has unsupported version {data.get('version')!r}"
        )
    files = data.get("files")
    if not isinstance(files, dict):
        raise CorruptSnapshotError(f"Snapshot {source} is missing its file records")

    records: Dict[str, FileRecord] = {}
    for key, raw in files.items():
        if not isinstance(raw, dict) or not isinstance(raw.get("file_hash"), str):
            raise CorruptSnapshotError(f"Snapshot {source} has a malformed record for {key!r}")
        records[key] = FileRecord(
            path=str(raw.get("path") or key),
            file_hash=raw["file_hash"],
            language=raw.get("language") if isinstance(raw.get("language"), str) else None,
            symbols=_str_list(raw.get("symbols")),
        )

    tree_data = data.get("tree")
    tree = _node_from_dict(tree_data, source) if tree_data is not None else None
    root = data.get("root")
    generated_at = data.get("generated_at")
    return Snapshot(
        root=root if isinstance(root, str) else str(source.parent.parent),
        records=records,
        tree=tree,
        generated_at=generated_at if isinstance(generated_at, str) else None,
    )


def _node_from_dict(data: Any, source: Path) -> TreeNode:
    if not isinstance(data, Mapping) or data.get("type") not in {"file", "directory"}:
        raise CorruptSnapshotError(f"Snapshot {source} has a malformed tree node")
    children_data = data.get("children") or []
    if not isinstance(children_data, list):
        raise CorruptSnapshotError(f"Snapshot {source} has a malformed tree node")
    language = data.get("language")
    return TreeNode(
        name=str(data.get("name", "")),
        path=str(data.get("path", "")),
        type=str(data["type"]),
        children=[_node_from_dict(child, source) for child in children_data],
        language=language if isinstance(language, str) else None,
        symbols=_str_list(data.get("symbols")),
    )


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


__all__ = ["DEFAULT_TREE_PATH", "TreeSnapshotStore"]
