"""Application-level holder for the currently displayed digest."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Any

from loguru import logger

from pulsedigest.config.app import AppConfig
from pulsedigest.parser import Digest
from pulsedigest.store.client import StoreClient, StoreRequestError

from .generation import GenerationService
from .loader import DigestLoader, DigestLoadError


@dataclass(slots=True)
class DigestState:
    """Snapshot of what the service currently knows."""

    digest: Digest | None
    status: str
    last_error: str | None
    last_refreshed: datetime | None
    generating: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "last_error": self.last_error,
            "last_refreshed": self.last_refreshed.isoformat() if self.last_refreshed else None,
            "generating": self.generating,
            "has_digest": self.digest is not None,
        }


class DigestService:
    """Keeps the latest loaded digest and coordinates reloads and generation.

    Load failures never propagate out of :meth:`refresh`; they are logged and
    the previously loaded digest stays available.
    """

    def __init__(self, loader: DigestLoader, generation: GenerationService | None = None) -> None:
        self._loader = loader
        self._generation = generation
        self._lock = Lock()
        self._digest: Digest | None = None
        self._status = "idle"
        self._last_error: str | None = None
        self._last_refreshed: datetime | None = None

    @classmethod
    def from_config(cls, config: AppConfig, *, client: StoreClient | None = None) -> "DigestService":
        if config.store is None:
            raise ValueError("Store is not configured; add a [store] block to the configuration")

        client = client or StoreClient.from_config(config.store)
        loader = DigestLoader(
            client,
            keywords=config.loader.keywords,
            min_content_length=config.loader.min_content_length,
            page_limit=config.store.page_limit,
        )
        generation = GenerationService(client, loader, config.generation) if config.generation else None
        return cls(loader, generation)

    @property
    def current(self) -> Digest | None:
        with self._lock:
            return self._digest

    @property
    def can_generate(self) -> bool:
        return self._generation is not None

    def state(self) -> DigestState:
        with self._lock:
            return DigestState(
                digest=self._digest,
                status=self._status,
                last_error=self._last_error,
                last_refreshed=self._last_refreshed,
                generating=bool(self._generation and self._generation.in_progress),
            )

    def refresh(self) -> Digest | None:
        """Reload the latest digest; returns ``None`` (and keeps the old one) on failure."""

        self._set_status("loading")
        try:
            digest = self._loader.load_latest()
        except (DigestLoadError, StoreRequestError) as exc:
            logger.error("Failed to load digest: {}", exc)
            self._record_failure(str(exc))
            return None

        self._record_success(digest)
        return digest

    def generate(self, *, wait: bool = True) -> Digest | None:
        """Trigger remote generation and adopt the reloaded digest.

        Errors are recorded and re-raised so schedulers can count failures.
        """

        if self._generation is None:
            raise RuntimeError("Generation is not configured; add a [generation] block")

        self._set_status("generating")
        try:
            digest = self._generation.generate(wait=wait)
        except Exception as exc:
            logger.error("Digest generation failed: {}", exc)
            self._record_failure(str(exc))
            raise

        if digest is not None:
            self._record_success(digest)
        else:
            self._set_status("active" if self.current is not None else "idle")
        return digest

    def _set_status(self, status: str) -> None:
        with self._lock:
            self._status = status

    def _record_success(self, digest: Digest) -> None:
        with self._lock:
            self._digest = digest
            self._status = "active"
            self._last_error = None
            self._last_refreshed = datetime.now(timezone.utc)

    def _record_failure(self, message: str) -> None:
        with self._lock:
            self._status = "error"
            self._last_error = message


__all__ = ["DigestService", "DigestState"]
