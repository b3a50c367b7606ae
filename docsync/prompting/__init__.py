"""Prompt construction for docstring generation."""

from .builder import PromptBuilder, PromptRequest, detect_file_type

__all__ = ["PromptBuilder", "PromptRequest", "detect_file_type"]
