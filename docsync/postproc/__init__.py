"""Post-processing of generated documentation."""

from .fences import strip_code_fences
from .html import render_html
from .summary import derive_summary

__all__ = ["derive_summary", "render_html", "strip_code_fences"]
