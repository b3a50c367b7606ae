"""Builds docstring-generation prompts for the text-generation model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..models import FileType
from .constants import CONVENTIONS, DOCSTRING_TEMPLATE, SYSTEM_PROMPT

_TYPE_BY_SUFFIX = {
    ".ts": FileType.TYPESCRIPT,
    ".tsx": FileType.TSX,
    ".js": FileType.JAVASCRIPT,
    ".jsx": FileType.JSX,
    ".py": FileType.PYTHON,
}


def detect_file_type(path: str | Path) -> FileType:
    """Map a file extension onto the fixed set of documented file types."""
    return _TYPE_BY_SUFFIX.get(Path(path).suffix.lower(), FileType.UNKNOWN)


@dataclass(frozen=True)
class PromptRequest:
    """Encapsulates a single generation request for one file."""

    path: str
    file_type: FileType
    prompt: str
    system: str


class PromptBuilder:
    """Embeds file content in the fixed docstring instruction template."""

    SYSTEM_PROMPT = SYSTEM_PROMPT

    def __init__(self, template: str | None = None) -> None:
        self.template = template or DOCSTRING_TEMPLATE

    def build(self, path: str, content: str) -> PromptRequest:
        file_type = detect_file_type(path)
        prompt = self.template.format(
            file_type=file_type.value,
            conventions=CONVENTIONS[file_type.value],
            content=content,
        )
        return PromptRequest(path=path, file_type=file_type, prompt=prompt, system=self.SYSTEM_PROMPT)


__all__ = ["PromptBuilder", "PromptRequest", "detect_file_type"]
