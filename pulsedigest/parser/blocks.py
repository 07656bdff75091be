"""Per-article extraction of title, body blocks and citations.

Each extractor scans the whole article segment for its own marker, so the
Contents and Citations sections may appear in either order.
"""

from __future__ import annotations

import re

from .inline import parse_inline
from .models import (
    DEFAULT_ARTICLE_TITLE,
    DEFAULT_CITATION_LABEL,
    Article,
    BlockKind,
    Citation,
    ContentBlock,
)
from .segment import ARTICLE_BOUNDARY

_TITLE = re.compile(
    r"^[ \t]*Article[ \t]+\d+[ \t]*[-–:][ \t]*(\S.*)$",
    re.IGNORECASE | re.MULTILINE,
)
_CONTENTS_MARKER = re.compile(r"^[ \t]*Contents[ \t]*\d*[ \t]*:?[ \t]*$", re.IGNORECASE | re.MULTILINE)
_CITATIONS_MARKER = re.compile(r"^[ \t]*Citations[ \t]*\d*[ \t]*:?[ \t]*$", re.IGNORECASE | re.MULTILINE)

_LEAD_IN_ITEM = re.compile(r"^[-•*]\s*\*\*[^*]*:")
_LIST_ITEM = re.compile(r"^[-•*]\s+")
_BULLET_PREFIX = re.compile(r"^[-•*]\s*")

_CITATION_URL = re.compile(r"\((https?://[^\s)]+)\)")


def extract_title(segment: str) -> str:
    match = _TITLE.search(segment)
    if match is None:
        return DEFAULT_ARTICLE_TITLE
    return match.group(1).strip() or DEFAULT_ARTICLE_TITLE


def extract_content_blocks(segment: str) -> tuple[ContentBlock, ...]:
    """Classify every line of the Contents section into a block."""

    body = _section(segment, _CONTENTS_MARKER, stops=(_CITATIONS_MARKER, ARTICLE_BOUNDARY))
    if body is None:
        return ()
    return tuple(classify_line(line) for line in _lines(body))


def classify_line(line: str) -> ContentBlock:
    """Turn one trimmed, non-empty body line into a content block."""

    if _LEAD_IN_ITEM.match(line):
        spans = parse_inline(_BULLET_PREFIX.sub("", line, count=1).strip())
        lead_in = spans[0].text.strip() if spans and spans[0].strong else None
        return ContentBlock(kind=BlockKind.LIST_ITEM, spans=spans, lead_in=lead_in or None)
    if _LIST_ITEM.match(line):
        spans = parse_inline(_BULLET_PREFIX.sub("", line, count=1).strip())
        return ContentBlock(kind=BlockKind.LIST_ITEM, spans=spans)
    return ContentBlock(kind=BlockKind.PARAGRAPH, spans=parse_inline(line))


def extract_citations(segment: str) -> tuple[Citation, ...]:
    """Collect citations from lines carrying a parenthesised http(s) URL.

    Lines without such a URL are skipped.
    """

    body = _section(segment, _CITATIONS_MARKER, stops=(ARTICLE_BOUNDARY,))
    if body is None:
        return ()

    citations: list[Citation] = []
    for line in _lines(body):
        citation = parse_citation_line(line)
        if citation is not None:
            citations.append(citation)
    return tuple(citations)


def parse_citation_line(line: str) -> Citation | None:
    match = _CITATION_URL.search(line)
    if match is None:
        return None
    label = line.replace("[", "").replace("]", "")
    label = _CITATION_URL.sub("", label, count=1).strip()
    return Citation(label=label or DEFAULT_CITATION_LABEL, url=match.group(1))


def parse_article(segment: str) -> Article:
    return Article(
        title=extract_title(segment),
        content_blocks=extract_content_blocks(segment),
        citations=extract_citations(segment),
    )


def _section(segment: str, marker: re.Pattern[str], *, stops: tuple[re.Pattern[str], ...]) -> str | None:
    start_match = marker.search(segment)
    if start_match is None:
        return None

    start = start_match.end()
    end = len(segment)
    for stop in stops:
        stop_match = stop.search(segment, start)
        if stop_match is not None and stop_match.start() < end:
            end = stop_match.start()
    return segment[start:end]


def _lines(body: str) -> list[str]:
    return [stripped for stripped in (line.strip() for line in body.split("\n")) if stripped]


__all__ = [
    "classify_line",
    "extract_citations",
    "extract_content_blocks",
    "extract_title",
    "parse_article",
    "parse_citation_line",
]
