from __future__ import annotations

import dataclasses
import json
from datetime import UTC, datetime

import pytest

from pulsedigest import Citation, parse_digest
from pulsedigest.parser import BlockKind, Digest


def test_parse_digest_minimal_article(minimal_digest_text: str) -> None:
    digest = parse_digest(minimal_digest_text)

    assert digest.title == "Portfolio Digest"
    assert len(digest.articles) == 1
    article = digest.articles[0]
    assert article.title == "Example Corp Update"
    assert len(article.content_blocks) == 2
    first, second = article.content_blocks
    assert first.kind is BlockKind.LIST_ITEM
    assert first.lead_in == "Revenue:"
    assert second.kind is BlockKind.LIST_ITEM
    assert second.text == "Market expanded"
    assert second.lead_in is None
    assert article.citations == (Citation(label="TechNews", url="https://example.com/a"),)


def test_parse_digest_full_document(sample_digest_text: str) -> None:
    digest = parse_digest(sample_digest_text)

    assert digest.title == "Scout Pulse Portfolio Digest - March 3, 2025"
    assert [article.title for article in digest.articles] == ["Example Corp Update", "Beta Industries"]

    first, second = digest.articles
    assert [block.text for block in first.content_blocks] == [
        "Revenue: grew 10%",
        "Market expanded",
        "Management reiterated full-year guidance.",
    ]
    paragraph = first.content_blocks[2]
    assert paragraph.kind is BlockKind.PARAGRAPH
    assert [span.text for span in paragraph.spans if span.emphasis] == ["full-year"]
    assert first.citations == (
        Citation("TechNews", "https://example.com/a"),
        Citation("Wire Report", "https://example.com/b?id=7&ref=x"),
    )

    assert [block.text for block in second.content_blocks] == ["New product line announced"]
    assert second.citations == (Citation("Source", "https://beta.example.org/news"),)


def test_parse_digest_untitled_article_keeps_position() -> None:
    digest = parse_digest("Article 1\nContents\nhello\nArticle 2 - Second")

    assert [article.title for article in digest.articles] == ["Untitled Article", "Second"]
    assert digest.articles[1].content_blocks == ()


def test_parse_digest_is_total_on_empty_or_unstructured_input() -> None:
    assert parse_digest("") == Digest()
    digest = parse_digest("scout pulse portfolio digest\nno articles here")
    assert digest.title == "Portfolio Digest"
    assert digest.articles == ()


def test_digest_models_are_immutable(minimal_digest_text: str) -> None:
    digest = parse_digest(minimal_digest_text)

    with pytest.raises(dataclasses.FrozenInstanceError):
        digest.title = "changed"  # type: ignore[misc]


def test_digest_to_dict_is_json_serialisable(minimal_digest_text: str) -> None:
    created = datetime(2025, 3, 3, 6, tzinfo=UTC)
    digest = parse_digest(minimal_digest_text).with_created_at(created)

    payload = json.loads(json.dumps(digest.to_dict()))

    assert payload["created_at"] == created.isoformat()
    block = payload["articles"][0]["content_blocks"][0]
    assert block["kind"] == "list_item"
    assert block["lead_in"] == "Revenue:"
    assert block["spans"][0] == {"text": "Revenue:", "strong": True, "emphasis": False}
    assert payload["articles"][0]["citations"] == [{"label": "TechNews", "url": "https://example.com/a"}]


def test_parse_digest_is_deterministic(sample_digest_text: str) -> None:
    first = parse_digest(sample_digest_text)
    second = parse_digest(sample_digest_text)

    assert first == second
    assert first.to_dict() == second.to_dict()
