"""Base configuration model and TOML loading helpers."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

_ENV_PREFIX = "env:"

ConfigT = TypeVar("ConfigT", bound="BaseConfig")


class BaseConfig(BaseModel):
    """Strict base for every configuration block; unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def load_config(model_cls: type[ConfigT], path: Path) -> ConfigT:
    """Read ``path`` as TOML and validate it against ``model_cls``.

    Raises :class:`FileNotFoundError` when the file is missing,
    :class:`tomllib.TOMLDecodeError` (a ``ValueError``) on malformed TOML and
    :class:`pydantic.ValidationError` when the content does not fit the model.
    """

    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open("rb") as handle:
        data = tomllib.load(handle)
    return model_cls.model_validate(data)


def resolve_env_reference(value: str | None, *, required: bool = True) -> str | None:
    """Expand ``"env:VAR_NAME"`` values from the process environment.

    Plain strings and ``None`` pass through untouched. A missing or empty
    variable raises :class:`EnvironmentError` unless ``required`` is false.
    """

    if value is None or not value.startswith(_ENV_PREFIX):
        return value

    var_name = value[len(_ENV_PREFIX):]
    resolved = os.getenv(var_name)
    if resolved:
        return resolved
    if required:
        raise EnvironmentError(f"Environment variable '{var_name}' is not set or empty")
    return None


__all__ = ["BaseConfig", "load_config", "resolve_env_reference"]
