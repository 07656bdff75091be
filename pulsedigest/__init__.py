"""Structured parsing and serving of portfolio digest documents.

The parser (:func:`parse_digest`) is a pure function; the remaining
subpackages wrap it with object-store access, scheduling and a web app.
"""

from .parser import Article, Citation, ContentBlock, Digest, parse_digest

__all__ = ["Article", "Citation", "ContentBlock", "Digest", "parse_digest"]
