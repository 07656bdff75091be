"""Shared fixtures data and fakes for the test suite."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import requests
from loguru import logger
from pytest import MonkeyPatch

from pulsedigest.config import AppConfig
from pulsedigest.store.models import StoredObject

MINIMAL_DIGEST = """Article 1 - Example Corp Update
Contents
- **Revenue:** grew 10%
- Market expanded
Citations
[TechNews](https://example.com/a)
"""

SAMPLE_DIGEST = """# Scout Pulse Portfolio Digest - March 3, 2025

Prepared for the investment team.

## Article 1 - Example Corp Update
### Contents
- **Revenue:** grew 10%
- Market expanded
Management reiterated *full-year* guidance.
### Citations
[TechNews](https://example.com/a)
[Wire Report](https://example.com/b?id=7&ref=x)
Unlinked mention in trade press

## Article 2: Beta Industries
Contents 2
* New product line announced
Citations 2
(https://beta.example.org/news)
"""


def make_response(
    status: int = 200,
    payload: Any = None,
    text: str | None = None,
    content_type: str | None = None,
) -> requests.Response:
    """Build a ready-made :class:`requests.Response` for session fakes."""

    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    response.url = "https://api.test/"
    response.encoding = "utf-8"
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = content_type or "application/json; charset=utf-8"
    else:
        response._content = (text or "").encode("utf-8")
        response.headers["Content-Type"] = content_type or "text/plain"
    return response


class RecordingSession(requests.Session):
    """Session that replays queued responses instead of touching the network."""

    def __init__(self, responses: list[requests.Response | Exception]) -> None:
        super().__init__()
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # type: ignore[override]
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


class FakeSource:
    """In-memory stand-in for :class:`pulsedigest.store.StoreClient`."""

    def __init__(self, objects: list[StoredObject] | None = None, files: dict[str, str] | None = None) -> None:
        self.objects = {obj.id: obj for obj in objects or []}
        self.files = files or {}
        self.download_requests: list[tuple[str, str]] = []
        self.executions: list[dict[str, Any]] = []

    def list_objects(self, limit: int = 1000, offset: int = 0) -> list[StoredObject]:
        # Listings carry metadata only, like the real API.
        return [
            StoredObject(id=obj.id, name=obj.name, title=obj.title, created_at=obj.created_at, updated_at=obj.updated_at)
            for obj in self.objects.values()
        ]

    def get_object(self, object_id: str) -> StoredObject:
        return self.objects[object_id]

    def get_download_url(self, file_ref: str, format: str = "original") -> str:  # noqa: A002
        self.download_requests.append((file_ref, format))
        return f"https://downloads.test/{file_ref}"

    def download_text(self, url: str) -> str:
        return self.files[url]

    def execute_async(self, interaction: str, *, environment: str, model: str, data: Any = None) -> dict[str, Any]:
        self.executions.append(
            {"interaction": interaction, "environment": environment, "model": model, "data": data}
        )
        return {"status": "started"}


def digest_object(content: Any = SAMPLE_DIGEST, **overrides: Any) -> StoredObject:
    values: dict[str, Any] = {
        "id": "obj-1",
        "name": "Scout Pulse Digest",
        "title": "",
        "created_at": utc(2025, 3, 3, 6),
        "updated_at": utc(2025, 3, 3, 7),
        "content_source": content,
    }
    values.update(overrides)
    return StoredObject(**values)


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)


def patch_load_config(monkeypatch: MonkeyPatch, config: AppConfig) -> None:
    """Force the CLI to return the provided config instead of reading from disk."""

    def _fake_load_config(model: object, path: Path) -> AppConfig:
        if model is not AppConfig:
            raise AssertionError("Unexpected config model request")
        return config

    monkeypatch.setattr("pulsedigest.cli.load_config", _fake_load_config)
