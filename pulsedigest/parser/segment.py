"""Split normalised digest text into one chunk per article."""

from __future__ import annotations

import re

ARTICLE_BOUNDARY = re.compile(r"^[ \t]*Article[ \t]+\d+", re.IGNORECASE | re.MULTILINE)


def split_articles(text: str) -> list[str]:
    """Return article segments in source order.

    Any preamble before the first ``Article <N>`` line is discarded. Text
    without a boundary yields an empty list.
    """

    starts = [match.start() for match in ARTICLE_BOUNDARY.finditer(text)]
    if not starts:
        return []

    ends = starts[1:] + [len(text)]
    segments = (text[start:end].strip() for start, end in zip(starts, ends))
    return [segment for segment in segments if segment]


__all__ = ["ARTICLE_BOUNDARY", "split_articles"]
