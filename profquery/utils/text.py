"""
Text helpers for snippets and metadata values.

All functions are pure (no I/O, no LLM).
"""

from __future__ import annotations

import re
from typing import Any

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str | None) -> str:
    """Replace any run of whitespace with a single space and strip."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def shorten(text: str | None, max_chars: int = 200) -> str:
    """
    Whitespace-collapsed preview of ``text`` no longer than ``max_chars``.

    Truncated previews end with ``...`` (counted inside the cap).
    """
    clean = collapse_whitespace(text)
    if len(clean) <= max_chars:
        return clean
    if max_chars <= 3:
        return clean[:max_chars]
    return clean[: max_chars - 3].rstrip() + "..."


def metadata_str(metadata: dict[str, Any] | None, key: str) -> str:
    """Read a metadata value as a trimmed string ("" when missing)."""
    if not metadata:
        return ""
    value = metadata.get(key)
    if value is None:
        return ""
    return str(value).strip()
