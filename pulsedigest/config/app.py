"""Application-level configuration model."""

from __future__ import annotations

from pydantic import Field

from pulsedigest.config.base import BaseConfig
from pulsedigest.config.generation import GenerationConfig, LoaderConfig
from pulsedigest.config.scheduler import SchedulerConfig
from pulsedigest.config.store import StoreConfig
from pulsedigest.config.web import WebUIConfig


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the digest service."""

    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    store: StoreConfig | None = Field(None, description="Remote object-store API connection")
    loader: LoaderConfig = Field(default_factory=LoaderConfig, description="Digest lookup settings")
    generation: GenerationConfig | None = Field(None, description="Remote digest generation settings")
    scheduler: SchedulerConfig | None = Field(None, description="Scheduler configuration")
    web: WebUIConfig | None = Field(None, description="Web page and API settings")


__all__ = ["AppConfig"]
