"""Resolve ``**bold**`` and ``*italic*`` delimiters into formatted spans."""

from __future__ import annotations

import re

from .models import InlineSpan

_BOLD = re.compile(r"\*\*(.*?)\*\*")
_ITALIC = re.compile(r"\*(.*?)\*")

# (character, strong, emphasis)
_Char = tuple[str, bool, bool]


def parse_inline(text: str) -> tuple[InlineSpan, ...]:
    """Split ``text`` into spans with the delimiter asterisks removed.

    Bold pairs are resolved over the raw text first; italic pairs are then
    matched on what remains, so an italic run may wrap a bold one.
    """

    if not text:
        return ()

    chars = _apply_bold(text)
    chars = _apply_italic(chars)
    return _group(chars)


def plain_text(text: str) -> str:
    """Return ``text`` with inline delimiters stripped."""

    return "".join(span.text for span in parse_inline(text))


def _apply_bold(text: str) -> list[_Char]:
    chars: list[_Char] = []
    cursor = 0
    for match in _BOLD.finditer(text):
        chars.extend((ch, False, False) for ch in text[cursor:match.start()])
        chars.extend((ch, True, False) for ch in match.group(1))
        cursor = match.end()
    chars.extend((ch, False, False) for ch in text[cursor:])
    return chars


def _apply_italic(chars: list[_Char]) -> list[_Char]:
    flat = "".join(ch for ch, _, _ in chars)
    result: list[_Char] = []
    cursor = 0
    for match in _ITALIC.finditer(flat):
        result.extend(chars[cursor:match.start()])
        result.extend((ch, strong, True) for ch, strong, _ in chars[match.start() + 1 : match.end() - 1])
        cursor = match.end()
    result.extend(chars[cursor:])
    return result


def _group(chars: list[_Char]) -> tuple[InlineSpan, ...]:
    spans: list[InlineSpan] = []
    buffer: list[str] = []
    style: tuple[bool, bool] | None = None
    for ch, strong, emphasis in chars:
        if style is not None and style != (strong, emphasis):
            spans.append(InlineSpan("".join(buffer), *style))
            buffer = []
        style = (strong, emphasis)
        buffer.append(ch)
    if style is not None and buffer:
        spans.append(InlineSpan("".join(buffer), *style))
    return tuple(spans)


__all__ = ["parse_inline", "plain_text"]
