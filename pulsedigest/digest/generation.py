"""Trigger remote digest generation and reload the result."""

from __future__ import annotations

import time
from threading import Lock
from typing import Any, Callable, Protocol

from loguru import logger

from pulsedigest.config.generation import GenerationConfig
from pulsedigest.parser import Digest


class _Executor(Protocol):
    def execute_async(self, interaction: str, *, environment: str, model: str, data: Any = ...) -> Any: ...


class _Reloader(Protocol):
    def load_latest(self) -> Digest: ...


class GenerationService:
    """Start a remote generation run, wait, then load the newest digest.

    Completion is not signalled by the remote side; after ``wait_seconds`` the
    latest stored digest is loaded even if it predates this run. Only one run
    may be in flight at a time.
    """

    def __init__(
        self,
        executor: _Executor,
        loader: _Reloader,
        config: GenerationConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._executor = executor
        self._loader = loader
        self._config = config
        self._sleep = sleep
        self._guard = Lock()

    @property
    def in_progress(self) -> bool:
        return self._guard.locked()

    def generate(self, *, wait: bool = True) -> Digest | None:
        """Run one generation cycle.

        Returns the reloaded digest, or ``None`` when another run is already in
        progress or ``wait`` is false. Errors propagate after the guard is released.
        """

        if not self._guard.acquire(blocking=False):
            logger.info("Generation already in progress; skipping")
            return None

        try:
            logger.info("Triggering remote digest generation via '{}'", self._config.interaction)
            self._executor.execute_async(
                self._config.interaction,
                environment=self._config.environment_id,
                model=self._config.model,
                data={"Task": self._config.task},
            )
            if not wait:
                return None

            logger.info("Waiting {:.0f}s for generation to complete", self._config.wait_seconds)
            self._sleep(self._config.wait_seconds)
            return self._loader.load_latest()
        finally:
            self._guard.release()


__all__ = ["GenerationService"]
