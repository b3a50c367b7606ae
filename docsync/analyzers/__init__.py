"""Source analyzers that enrich the workspace snapshot."""

from .tree_sitter import TREE_SITTER_AVAILABLE, ParsedSymbol, SymbolExtractor

__all__ = ["ParsedSymbol", "SymbolExtractor", "TREE_SITTER_AVAILABLE"]
