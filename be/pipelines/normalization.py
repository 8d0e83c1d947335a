"""Text helpers for transcripts: trimming, sentence splitting, truncation.

Used by the enrichment fallbacks and by the feed projection.
"""
from __future__ import annotations

import re
from typing import Any

ELLIPSIS = "..."

_SENTENCE_BOUNDARY = re.compile(r"[.!?]")


def clean_str(value: Any) -> str:
    """Trimmed string form of an optional request field; non-strings become ''."""
    if not isinstance(value, str):
        return ""
    return value.strip()


def first_sentence(text: str) -> str:
    """Text up to the first ``.``, ``!`` or ``?``, trimmed.

    A transcript without terminators is returned whole (trimmed).
    """
    return _SENTENCE_BOUNDARY.split(text, maxsplit=1)[0].strip()


def truncate(text: str, limit: int, keep: int | None = None) -> str:
    """Return ``text`` if it fits in ``limit`` chars, else its first ``keep`` chars plus an ellipsis.

    ``keep`` defaults to ``limit - 3`` so the result is exactly ``limit`` long.

    Examples:
        truncate("abcdef", 5)        -> "ab..."
        truncate("abcdef", 5, keep=5) -> "abcde..."
    """
    if len(text) <= limit:
        return text
    if keep is None:
        keep = limit - len(ELLIPSIS)
    return text[:keep] + ELLIPSIS


def strip_wrapping_quotes(text: str) -> str:
    """Remove one leading and one trailing quote character, then trim."""
    return re.sub(r'^["\']|["\']$', '', text).strip()
