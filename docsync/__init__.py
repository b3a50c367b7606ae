"""Keep per-file documentation in sync with source changes."""

__version__ = "0.1.0"
