"""Digest parser: raw digest text to structured articles."""

from __future__ import annotations

from .blocks import extract_citations, extract_content_blocks, extract_title, parse_article
from .document import DIGEST_HEADING, extract_document_title, parse_digest
from .inline import parse_inline, plain_text
from .models import (
    DEFAULT_ARTICLE_TITLE,
    DEFAULT_CITATION_LABEL,
    DEFAULT_DIGEST_TITLE,
    Article,
    BlockKind,
    Citation,
    ContentBlock,
    Digest,
    InlineSpan,
)
from .normalize import normalize_text
from .segment import split_articles

__all__ = [
    "DEFAULT_ARTICLE_TITLE",
    "DEFAULT_CITATION_LABEL",
    "DEFAULT_DIGEST_TITLE",
    "DIGEST_HEADING",
    "Article",
    "BlockKind",
    "Citation",
    "ContentBlock",
    "Digest",
    "InlineSpan",
    "extract_citations",
    "extract_content_blocks",
    "extract_document_title",
    "extract_title",
    "normalize_text",
    "parse_article",
    "parse_digest",
    "parse_inline",
    "plain_text",
    "split_articles",
]
