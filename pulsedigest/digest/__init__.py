"""Digest loading, generation and rendering collaborators."""

from __future__ import annotations

from .generation import GenerationService
from .loader import (
    ContentUnavailableError,
    DigestLoader,
    DigestLoadError,
    DigestNotFoundError,
    EmptyDigestError,
    select_latest,
)
from .renderer import DigestRenderer
from .service import DigestService, DigestState

__all__ = [
    "ContentUnavailableError",
    "DigestLoadError",
    "DigestLoader",
    "DigestNotFoundError",
    "DigestRenderer",
    "DigestService",
    "DigestState",
    "EmptyDigestError",
    "GenerationService",
    "select_latest",
]
