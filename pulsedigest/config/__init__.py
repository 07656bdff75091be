"""Configuration namespace for pulsedigest."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config, resolve_env_reference
from .generation import GenerationConfig, LoaderConfig
from .scheduler import SchedulerConfig, SchedulerJobConfig
from .store import StoreConfig
from .web import WebAuthConfig, WebUIConfig

__all__ = [
    "AppConfig",
    "BaseConfig",
    "GenerationConfig",
    "LoaderConfig",
    "SchedulerConfig",
    "SchedulerJobConfig",
    "StoreConfig",
    "WebAuthConfig",
    "WebUIConfig",
    "load_config",
    "resolve_env_reference",
]
