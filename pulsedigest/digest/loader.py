"""Locate the latest digest document in the object store and parse it."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

from loguru import logger

from pulsedigest.parser import Digest, parse_digest
from pulsedigest.store.models import StoredObject

_REMOTE_SCHEMES = ("gs://", "s3://")
_FILE_REF_KEYS = ("file", "store", "path", "key")


class DigestLoadError(RuntimeError):
    """Base class for failures while loading the latest digest."""


class DigestNotFoundError(DigestLoadError):
    """Raised when no stored document looks like a digest."""


class ContentUnavailableError(DigestLoadError):
    """Raised when a digest object has no resolvable content."""


class EmptyDigestError(DigestLoadError):
    """Raised when digest content is missing or too short to be meaningful."""


class DigestSource(Protocol):
    def list_objects(self, limit: int = ..., offset: int = ...) -> list[StoredObject]: ...

    def get_object(self, object_id: str) -> StoredObject: ...

    def get_download_url(self, file_ref: str, format: str = ...) -> str: ...  # noqa: A002

    def download_text(self, url: str) -> str: ...


def select_latest(objects: Iterable[StoredObject], keywords: Sequence[str]) -> StoredObject | None:
    """Return the most recently modified object whose name or title matches a keyword.

    Objects without an identifier cannot be fetched and are never selected.
    """

    lowered = [keyword.lower() for keyword in keywords]
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    ordered = sorted(objects, key=lambda obj: obj.last_modified or epoch, reverse=True)
    for candidate in ordered:
        if not candidate.id:
            continue
        text = candidate.search_text
        if any(keyword in text for keyword in lowered):
            return candidate
    return None


class DigestLoader:
    """Resolve, download and parse the newest digest document."""

    def __init__(
        self,
        source: DigestSource,
        *,
        keywords: Sequence[str] = ("digest", "pulse"),
        min_content_length: int = 20,
        page_limit: int = 1000,
    ) -> None:
        self._source = source
        self._keywords = tuple(keywords)
        self._min_content_length = min_content_length
        self._page_limit = page_limit

    def find_latest_object(self) -> StoredObject:
        objects = self._source.list_objects(limit=self._page_limit)
        if not objects:
            raise DigestNotFoundError("No documents found in object store")

        match = select_latest(objects, self._keywords)
        if match is None:
            raise DigestNotFoundError("No digest document found")
        logger.debug("Selected digest object {} ({})", match.id, match.name or match.title)
        return match

    def resolve_content(self, stored: StoredObject) -> str:
        """Return the raw text for ``stored``, downloading it when it is a file reference."""

        source = stored.content_source
        if not source:
            raise ContentUnavailableError(f"No content source in digest object {stored.id}")

        if isinstance(source, str):
            if source.startswith(_REMOTE_SCHEMES):
                return self._download(source)
            return source

        if isinstance(source, Mapping):
            file_ref = _file_reference(source)
            if file_ref is None:
                raise ContentUnavailableError(f"Content source for {stored.id} has no file reference")
            return self._download(file_ref)

        raise ContentUnavailableError(f"Unsupported content source type {type(source).__name__}")

    def load_latest(self) -> Digest:
        """Find, fetch and parse the newest digest, stamping it with the object's timestamp."""

        summary = self.find_latest_object()
        stored = self._source.get_object(summary.id)
        text = self.resolve_content(stored)

        if not text or len(text.strip()) < self._min_content_length:
            raise EmptyDigestError("Empty or invalid digest content")

        digest = parse_digest(text)
        created_at = stored.created_at or stored.updated_at or datetime.now(timezone.utc)
        logger.info(
            "Loaded digest '{}' from object {} with {} articles",
            digest.title,
            stored.id,
            len(digest.articles),
        )
        return digest.with_created_at(created_at)

    def _download(self, file_ref: str) -> str:
        url = self._source.get_download_url(file_ref, "original")
        logger.debug("Downloading digest content from {}", file_ref)
        return self._source.download_text(url)


def _file_reference(source: Mapping[str, Any]) -> str | None:
    for key in _FILE_REF_KEYS:
        value = source.get(key)
        if value:
            return str(value)
    return None


__all__ = [
    "ContentUnavailableError",
    "DigestLoadError",
    "DigestLoader",
    "DigestNotFoundError",
    "DigestSource",
    "EmptyDigestError",
    "select_latest",
]
