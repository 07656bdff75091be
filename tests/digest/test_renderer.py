from __future__ import annotations

from pulsedigest.digest import DigestRenderer
from pulsedigest.digest.renderer import render_spans
from pulsedigest.parser import Digest, InlineSpan, parse_digest
from tests.helpers import SAMPLE_DIGEST, utc


def test_render_spans_escapes_and_wraps() -> None:
    html = render_spans(
        [
            InlineSpan("<b>", strong=False),
            InlineSpan("both", strong=True, emphasis=True),
        ]
    )

    assert str(html) == "&lt;b&gt;<strong><em>both</em></strong>"


def test_render_digest_structure() -> None:
    digest = parse_digest(SAMPLE_DIGEST).with_created_at(utc(2025, 3, 3, 6))

    html = DigestRenderer().render(digest)

    assert html.count('<details class="pulse-article">') == 2
    assert '<span class="pulse-article-title">Example Corp Update</span>' in html
    assert "Mar 03, 2025" in html
    assert "<li><strong>Revenue:</strong> grew 10%</li>" in html
    assert "<li>Market expanded</li>" in html
    assert "<p>Management reiterated <em>full-year</em> guidance.</p>" in html
    assert 'href="https://example.com/b?id=7&amp;ref=x"' in html
    assert 'target="_blank" rel="noopener noreferrer"' in html
    assert html.endswith("\n")


def test_render_groups_consecutive_list_items() -> None:
    digest = parse_digest(SAMPLE_DIGEST)

    html = DigestRenderer().render(digest)

    # One list for the two leading items of article 1, one for article 2.
    assert html.count('<ul class="pulse-article-content">') == 2


def test_render_empty_digest() -> None:
    html = DigestRenderer().render(Digest())

    assert "This digest contains no articles." in html
    assert "pulse-date" not in html


def test_render_empty_message_is_escaped() -> None:
    html = DigestRenderer().render_empty('Click "Generate" <now>')

    assert html == '<div class="pulse-empty-state"><p>Click &#34;Generate&#34; &lt;now&gt;</p></div>\n'
