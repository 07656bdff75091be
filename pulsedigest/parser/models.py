"""Immutable data models produced by the digest parser."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any


DEFAULT_DIGEST_TITLE = "Portfolio Digest"
DEFAULT_ARTICLE_TITLE = "Untitled Article"
DEFAULT_CITATION_LABEL = "Source"


class BlockKind(str, Enum):
    """Kinds of body blocks found in an article's Contents section."""

    PARAGRAPH = "paragraph"
    LIST_ITEM = "list_item"


@dataclass(frozen=True, slots=True)
class InlineSpan:
    """A run of text sharing the same inline formatting."""

    text: str
    strong: bool = False
    emphasis: bool = False


@dataclass(frozen=True, slots=True)
class ContentBlock:
    """One paragraph or list item with inline formatting resolved."""

    kind: BlockKind
    spans: tuple[InlineSpan, ...] = ()
    lead_in: str | None = None

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "text": self.text,
            "lead_in": self.lead_in,
            "spans": [
                {"text": span.text, "strong": span.strong, "emphasis": span.emphasis}
                for span in self.spans
            ],
        }


@dataclass(frozen=True, slots=True)
class Citation:
    """A labelled external source attached to an article."""

    label: str
    url: str


@dataclass(frozen=True, slots=True)
class Article:
    """A single article parsed from one segment of the digest."""

    title: str
    content_blocks: tuple[ContentBlock, ...] = ()
    citations: tuple[Citation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content_blocks": [block.to_dict() for block in self.content_blocks],
            "citations": [{"label": c.label, "url": c.url} for c in self.citations],
        }


@dataclass(frozen=True, slots=True)
class Digest:
    """The full parsed document: a title plus ordered articles."""

    title: str = DEFAULT_DIGEST_TITLE
    articles: tuple[Article, ...] = field(default_factory=tuple)
    created_at: datetime | None = None

    def with_created_at(self, created_at: datetime | None) -> "Digest":
        """Return a copy carrying the timestamp supplied by the loader."""

        return replace(self, created_at=created_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "articles": [article.to_dict() for article in self.articles],
        }


__all__ = [
    "DEFAULT_ARTICLE_TITLE",
    "DEFAULT_CITATION_LABEL",
    "DEFAULT_DIGEST_TITLE",
    "Article",
    "BlockKind",
    "Citation",
    "ContentBlock",
    "Digest",
    "InlineSpan",
]
