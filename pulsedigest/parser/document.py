"""Top-level digest parsing: normalise, segment, extract, assemble."""

from __future__ import annotations

import re

from loguru import logger

from .blocks import parse_article
from .models import DEFAULT_DIGEST_TITLE, Digest
from .normalize import normalize_text
from .segment import split_articles

DIGEST_HEADING = "Scout Pulse Portfolio Digest"

_HEADING_LINE = re.compile(rf"^#?[ \t]*{re.escape(DIGEST_HEADING)}.*$", re.MULTILINE)
_HEADING_MARKER = re.compile(r"^#+\s*")


def extract_document_title(text: str) -> str:
    """Find the digest heading line in ``text`` or fall back to a generic title."""

    match = _HEADING_LINE.search(text)
    if match is None:
        return DEFAULT_DIGEST_TITLE
    title = _HEADING_MARKER.sub("", match.group(0)).strip()
    return title or DEFAULT_DIGEST_TITLE


def parse_digest(raw_text: str) -> Digest:
    """Parse a raw digest document into a :class:`Digest`.

    The parser is total: malformed or empty input yields fallback titles and
    an empty article list rather than an error.
    """

    text = normalize_text(raw_text)
    title = extract_document_title(text)
    articles = tuple(parse_article(segment) for segment in split_articles(text))
    logger.debug("Parsed digest '{}' with {} articles", title, len(articles))
    return Digest(title=title, articles=articles)


__all__ = ["DIGEST_HEADING", "extract_document_title", "parse_digest"]
