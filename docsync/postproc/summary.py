"""Derives a human-readable summary from documented source text."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Sequence

from ..models import FileType

MAX_SUMMARY_CHARS = 400

_PY_DOCSTRING = re.compile(r'^\s*[rRuU]?("""|\'\'\')(.*?)\1', re.DOTALL)
_BLOCK_COMMENT = re.compile(r"^\s*/\*\*?(.*?)\*/", re.DOTALL)


def derive_summary(
    content: str,
    file_type: FileType,
    path: str,
    symbols: Sequence[str] = (),
) -> str:
    """Return the leading doc comment's first paragraph, or a generic description."""
    if file_type is FileType.PYTHON:
        text = _python_module_docstring(content)
    else:
        text = _leading_comment(content)

    paragraph = _first_paragraph(text) if text else ""
    if paragraph:
        return _truncate(paragraph)

    name = Path(path).name
    if symbols:
        listed = ", ".join(symbols[:5])
        more = f" and {len(symbols) - 5} more" if len(symbols) > 5 else ""
        return f"{file_type.value} file {name} defining {listed}{more}."
    return f"{file_type.value} file {name}."


def _python_module_docstring(content: str) -> Optional[str]:
    body = _skip_preamble(content, prefixes=("#",))
    match = _PY_DOCSTRING.match(body)
    return match.group(2) if match else None


def _leading_comment(content: str) -> Optional[str]:
    body = _skip_preamble(content, prefixes=("#!", "'use ", '"use '))
    match = _BLOCK_COMMENT.match(body)
    if match:
        lines = [line.strip().lstrip("*").strip() for line in match.group(1).splitlines()]
        return "\n".join(line for line in lines if not line.startswith("@"))

    comment_lines: List[str] = []
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("//"):
            comment_lines.append(stripped.lstrip("/").strip())
            continue
        if stripped.startswith("#") and not stripped.startswith("#include"):
            comment_lines.append(stripped.lstrip("#").strip())
            continue
        break
    return "\n".join(comment_lines) if comment_lines else None


def _skip_preamble(content: str, *, prefixes: Sequence[str]) -> str:
    lines = content.splitlines()
    index = 0
    while index < len(lines):
        stripped = lines[index].strip()
        if not stripped or any(stripped.startswith(prefix) for prefix in prefixes):
            index += 1
            continue
        break
    return "\n".join(lines[index:])


def _first_paragraph(text: str) -> str:
    paragraph: List[str] = []
    for line in text.strip().splitlines():
        stripped = line.strip()
        if not stripped:
            if paragraph:
                break
            continue
        paragraph.append(stripped)
    return " ".join(paragraph)


def _truncate(text: str) -> str:
    if len(text) <= MAX_SUMMARY_CHARS:
        return text
    return text[: MAX_SUMMARY_CHARS - 3].rstrip() + "..."


__all__ = ["MAX_SUMMARY_CHARS", "derive_summary"]
