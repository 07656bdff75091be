"""Canonicalise raw digest text before structural parsing."""

from __future__ import annotations

import re

# Soft hyphen plus the zero-width characters generators tend to leak.
_INVISIBLE_CHARS = re.compile("[\u00ad\u200b\u200c\u200d\u2060\ufeff]")
_LEADING_HEADING = re.compile(r"^#+[ \t]*", re.MULTILINE)
_STRAY_HEADING = re.compile(r"#+(?=\s|$)|#{3,}")


def normalize_text(text: str) -> str:
    """Strip formatting noise from ``text``.

    Carriage returns, soft hyphens and zero-width characters are removed,
    Markdown heading markers are dropped from line starts, stray marker runs
    elsewhere are cleaned up, and the result is trimmed. Never raises.
    """

    cleaned = text.replace("\r", "")
    cleaned = _INVISIBLE_CHARS.sub("", cleaned)
    cleaned = _LEADING_HEADING.sub("", cleaned)
    cleaned = _STRAY_HEADING.sub("", cleaned)
    return cleaned.strip()


__all__ = ["normalize_text"]
