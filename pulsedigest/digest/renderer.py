"""Render parsed digests into HTML fragments."""

from __future__ import annotations

from collections.abc import Iterable
from itertools import groupby

from jinja2 import BaseLoader, Environment
from markupsafe import Markup, escape

from pulsedigest.parser import ContentBlock, Digest, InlineSpan, parse_inline

_DEFAULT_TEMPLATE = """
<section class="pulse-digest">
  <header class="pulse-digest-header">
    <h2 class="pulse-digest-title">{{ digest.title }}</h2>
    {% if digest.created_at %}
    <span class="pulse-date">{{ digest.created_at.strftime("%b %d, %Y") }}</span>
    <span class="pulse-last-update">Last Update: {{ digest.created_at.strftime("%Y-%m-%d %H:%M %Z") | trim }}</span>
    {% endif %}
  </header>
  <div class="pulse-articles">
  {% for article in digest.articles %}
    <details class="pulse-article">
      <summary class="pulse-article-header">
        <span class="pulse-article-title">{{ article.title | inline }}</span>
      </summary>
      <div class="pulse-article-details">
        <div class="pulse-article-body">
        {% for kind, blocks in article.content_blocks | group_blocks %}
          {% if kind == "list_item" %}
          <ul class="pulse-article-content">
            {% for block in blocks %}<li>{{ block.spans | spans }}</li>{% endfor %}
          </ul>
          {% else %}
            {% for block in blocks %}<p>{{ block.spans | spans }}</p>{% endfor %}
          {% endif %}
        {% endfor %}
        </div>
        {% if article.citations %}
        <div class="pulse-article-sources">
          <strong>Citations:</strong>
          <ul class="pulse-source-list">
          {% for citation in article.citations %}
            <li><a href="{{ citation.url }}" target="_blank" rel="noopener noreferrer">{{ citation.label | inline }}</a></li>
          {% endfor %}
          </ul>
        </div>
        {% endif %}
      </div>
    </details>
  {% else %}
    <div class="pulse-empty-state"><p>This digest contains no articles.</p></div>
  {% endfor %}
  </div>
</section>
"""

_EMPTY_TEMPLATE = """<div class="pulse-empty-state"><p>{{ message }}</p></div>"""


def render_spans(spans: Iterable[InlineSpan]) -> Markup:
    """Render inline spans as escaped HTML with ``<strong>``/``<em>`` wrappers."""

    parts: list[str] = []
    for span in spans:
        html = str(escape(span.text))
        if span.emphasis:
            html = f"<em>{html}</em>"
        if span.strong:
            html = f"<strong>{html}</strong>"
        parts.append(html)
    return Markup("".join(parts))


def _render_inline_text(text: str) -> Markup:
    return render_spans(parse_inline(text))


def _group_blocks(blocks: Iterable[ContentBlock]) -> list[tuple[str, list[ContentBlock]]]:
    return [(kind.value, list(group)) for kind, group in groupby(blocks, key=lambda block: block.kind)]


class DigestRenderer:
    """Render :class:`Digest` values into HTML."""

    def __init__(self, template: str | None = None) -> None:
        env = Environment(loader=BaseLoader(), autoescape=True, trim_blocks=True, lstrip_blocks=True)
        env.filters["spans"] = render_spans
        env.filters["inline"] = _render_inline_text
        env.filters["group_blocks"] = _group_blocks
        self._template = env.from_string(template or _DEFAULT_TEMPLATE)
        self._empty_template = env.from_string(_EMPTY_TEMPLATE)

    def render(self, digest: Digest) -> str:
        return self._template.render(digest=digest).strip() + "\n"

    def render_empty(self, message: str) -> str:
        return self._empty_template.render(message=message).strip() + "\n"


__all__ = ["DigestRenderer", "render_spans"]
