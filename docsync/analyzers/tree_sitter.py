"""Tree-sitter powered symbol extraction."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..hashing import read_text
from ..logging import get_logger

try:  # pragma: no cover - optional dependency
    from tree_sitter import Parser
    from tree_sitter_language_pack import get_parser

    TREE_SITTER_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    Parser = None  # type: ignore[assignment,misc]
    get_parser = None  # type: ignore[assignment]
    TREE_SITTER_AVAILABLE = False


_LANGUAGE_BY_SUFFIX = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
}

_CLASS_NODES = {
    "class_definition",
    "class_declaration",
    "abstract_class_declaration",
    "interface_declaration",
    "type_alias_declaration",
}

_FUNCTION_NODES = {
    "function_definition",
    "function_declaration",
    "generator_function_declaration",
    "method_definition",
}

_FUNCTION_VALUES = {"arrow_function", "function_expression", "function"}


@dataclass(frozen=True)
class ParsedSymbol:
    name: str
    kind: str


class SymbolExtractor:
    """Extracts class, interface and function names using tree-sitter parsers."""

    def __init__(self, enabled: Optional[bool] = None) -> None:
        self._enabled = TREE_SITTER_AVAILABLE if enabled is None else enabled
        self._parsers: Dict[str, "Parser"] = {}
        self.logger = get_logger("analyzers.tree_sitter")

    @property
    def enabled(self) -> bool:
        return self._enabled

    def supports(self, path: str | Path) -> bool:
        return self._enabled and Path(path).suffix.lower() in _LANGUAGE_BY_SUFFIX

    def extract(self, path: str | Path, source: str) -> List[ParsedSymbol]:
        if not self.supports(path):
            return []
        language_key = _LANGUAGE_BY_SUFFIX[Path(path).suffix.lower()]
        parser = self._get_parser(language_key)
        if parser is None:
            return []
        source_bytes = source.encode("utf-8")
        tree = parser.parse(source_bytes)
        return list(self._collect(tree.root_node, source_bytes))

    def symbol_names(self, path: Path) -> List[str]:
        """Return symbol names for a file on disk; unreadable files yield nothing."""
        if not self.supports(path):
            return []
        try:
            source = read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.debug("Skipping symbols for %s: %s", path, exc)
            return []
        return [symbol.name for symbol in self.extract(path, source)]

    def _get_parser(self, language_key: str) -> Optional["Parser"]:
        parser = self._parsers.get(language_key)
        if parser is not None:
            return parser
        if not TREE_SITTER_AVAILABLE:
            return None
        try:
            parser = get_parser(language_key)  # type: ignore[misc]
        except Exception as exc:  # pragma: no cover - depends on installed grammars
            self.logger.warning("Failed to load tree-sitter parser for %s: %s", language_key, exc)
            self._enabled = False
            return None
        self._parsers[language_key] = parser
        return parser

    @staticmethod
    def _node_text(node, source_bytes) -> str:  # type: ignore[no-untyped-def]
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def _collect(self, node, source_bytes) -> Iterable[ParsedSymbol]:  # type: ignore[no-untyped-def]
        for child in node.children:
            if child.type in _CLASS_NODES or child.type in _FUNCTION_NODES:
                name_node = child.child_by_field_name("name")
                name = self._node_text(name_node, source_bytes) if name_node else ""
                if name:
                    kind = "class" if child.type in _CLASS_NODES else "function"
                    yield ParsedSymbol(name=name, kind=kind)
            elif child.type == "variable_declarator":
                value = child.child_by_field_name("value")
                name_node = child.child_by_field_name("name")
                if value is not None and value.type in _FUNCTION_VALUES and name_node is not None:
                    yield ParsedSymbol(name=self._node_text(name_node, source_bytes), kind="function")
            yield from self._collect(child, source_bytes)


__all__ = ["ParsedSymbol", "SymbolExtractor", "TREE_SITTER_AVAILABLE"]
