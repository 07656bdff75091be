"""Web interface for the digest service."""

from __future__ import annotations

from .app import create_app

__all__ = ["create_app"]
