"""Removal of Markdown code fences wrapped around model output."""

from __future__ import annotations

import re
from typing import List

FENCE_TOKEN = "```"

_DELIMITER_LINE = re.compile(r"^\s*```[\w.+#-]*\s*$")
_CLOSING_LINE = re.compile(r"^\s*```\s*$")


def strip_code_fences(text: str) -> str:
    """Return ``text`` without the fences a model wrapped around it.

    A single well-formed block (one opening delimiter line, optionally tagged
    with a language, and one bare closing line) yields exactly its interior;
    prose outside the block is dropped. Anything else containing fence tokens
    falls back to removing every delimiter line and any leftover token, so the
    result never carries a fence even when the model's output is malformed.
    Text without fences is returned unchanged.
    """
    if FENCE_TOKEN not in text:
        return text

    lines = text.split("\n")
    delimiters = [index for index, line in enumerate(lines) if _DELIMITER_LINE.match(line)]
    if len(delimiters) == 2 and _CLOSING_LINE.match(lines[delimiters[1]]):
        start, end = delimiters
        return "\n".join(lines[start + 1 : end])

    return _strip_fence_tokens(lines)


def _strip_fence_tokens(lines: List[str]) -> str:
    kept = [line.replace(FENCE_TOKEN, "") for line in lines if not _DELIMITER_LINE.match(line)]
    while kept and not kept[0].strip():
        kept.pop(0)
    while kept and not kept[-1].strip():
        kept.pop()
    return "\n".join(kept)


__all__ = ["FENCE_TOKEN", "strip_code_fences"]
