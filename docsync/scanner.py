"""Workspace scanning and tree building utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .config import DocSyncConfig
from .hashing import read_text
from .logging import get_logger
from .models import TreeNode

_EXCLUDED_DIRS = {
    "node_modules",
    "dist",
    ".git",
    "coverage",
    ".next",
    ".cache",
    ".docsync",
    "__pycache__",
    ".venv",
}

_LANGUAGE_BY_SUFFIX = {
    ".py": "Python",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".rb": "Ruby",
    ".java": "Java",
    ".go": "Go",
    ".c": "C",
    ".h": "C",
    ".cpp": "C++",
    ".hpp": "C++",
    ".md": "Markdown",
    ".txt": "Text",
}

PREVIEW_UNAVAILABLE = "Unable to read file content"

SymbolSource = Callable[[Path], List[str]]

logger = get_logger("scanner")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .docsync.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def detect_language(path: str | Path) -> str | None:
    return _LANGUAGE_BY_SUFFIX.get(Path(path).suffix.lower())


def file_preview(path: Path, lines: int = 5) -> str:
    """Return the first ``lines`` lines of a file, marking truncation with ``...``."""
    try:
        content = read_text(path)
    except (OSError, UnicodeDecodeError):
        return PREVIEW_UNAVAILABLE
    head = content.split("\n")[:lines]
    suffix = "\n..." if len(head) >= lines else ""
    return "\n".join(head) + suffix


@dataclass
class ScanResult:
    """Tree structure plus the supported files in traversal order."""

    tree: TreeNode
    files: List[str] = field(default_factory=list)


class WorkspaceScanner:
    """Walks the workspace to produce the browsable tree."""

    def __init__(
        self,
        config: DocSyncConfig,
        symbol_source: Optional[SymbolSource] = None,
    ) -> None:
        self.config = config
        self._extensions = {ext.lower() for ext in config.include_extensions}
        self._symbol_source = symbol_source
        self._rules: List[IgnoreRule] = []

    def is_supported(self, rel_path: str) -> bool:
        path = Path(rel_path)
        if any(part in _EXCLUDED_DIRS for part in path.parts[:-1]):
            return False
        return path.suffix.lower() in self._extensions

    def scan(self) -> ScanResult:
        root = self.config.root
        self._rules = _parse_gitignore(root / ".gitignore")
        for pattern in self.config.exclude_paths:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                self._rules.append(rule)

        files: List[str] = []
        tree = self._read_directory(root, "", files)
        tree.name = root.name
        logger.debug("Scan of %s found %d supported file(s)", root, len(files))
        return ScanResult(tree=tree, files=files)

    def _read_directory(self, directory: Path, rel_dir: str, files: List[str]) -> TreeNode:
        node = TreeNode(name=directory.name, path=rel_dir, type="directory")
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            logger.warning("Unable to read directory %s: %s", directory, exc)
            return node

        for entry in entries:
            if entry.name.startswith("."):
                continue
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            is_dir = entry.is_dir(follow_symlinks=False)
            if is_dir:
                if entry.name in _EXCLUDED_DIRS or _should_ignore(rel_path, True, self._rules):
                    logger.debug("Skipping ignored directory: %s", rel_path)
                    continue
                child = self._read_directory(Path(entry.path), rel_path, files)
                if not child.children:
                    logger.debug("Skipping empty directory: %s", rel_path)
                    continue
                node.children.append(child)
                continue

            if not entry.is_file() or _should_ignore(rel_path, False, self._rules):
                continue
            if Path(entry.name).suffix.lower() not in self._extensions:
                logger.debug("Skipping unsupported file: %s", rel_path)
                continue

            symbols = self._symbol_source(Path(entry.path)) if self._symbol_source else []
            node.children.append(
                TreeNode(
                    name=entry.name,
                    path=rel_path,
                    type="file",
                    language=detect_language(entry.name),
                    symbols=symbols,
                )
            )
            files.append(rel_path)
        return node


__all__ = [
    "IgnoreRule",
    "PREVIEW_UNAVAILABLE",
    "ScanResult",
    "WorkspaceScanner",
    "build_ignore_rule",
    "detect_language",
    "file_preview",
]
