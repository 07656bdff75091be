from __future__ import annotations

from pulsedigest.parser.segment import split_articles


def test_split_articles_discards_preamble() -> None:
    text = "Intro paragraph\nArticle 1 - A\nbody\narticle 2: B"

    assert split_articles(text) == ["Article 1 - A\nbody", "article 2: B"]


def test_split_articles_without_boundary_returns_empty_list() -> None:
    assert split_articles("Nothing to see here") == []
    assert split_articles("") == []


def test_split_articles_ignores_mid_line_mentions() -> None:
    text = "Article 1 - A\nSee Article 3 for details\nArticle 2 - B"

    segments = split_articles(text)

    assert len(segments) == 2
    assert segments[0] == "Article 1 - A\nSee Article 3 for details"


def test_split_articles_preserves_source_order() -> None:
    text = "Article 9 - Last\nArticle 1 - First"

    assert [segment.splitlines()[0] for segment in split_articles(text)] == [
        "Article 9 - Last",
        "Article 1 - First",
    ]
