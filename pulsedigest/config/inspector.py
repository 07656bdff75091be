"""Validate configuration files and describe the configuration schema."""

from __future__ import annotations

from pathlib import Path
from types import UnionType
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .app import AppConfig
from .base import load_config


class ConfigInspectionError(RuntimeError):
    """Raised when configuration inspection fails unexpectedly."""


def check_config(path: Path, *, config_cls: type[AppConfig] = AppConfig) -> tuple[dict[str, Any], int, AppConfig | None]:
    """Validate the configuration file and collect warnings.

    Returns ``(result, exit_code, config_or_None)``. Exit codes: 0 ok,
    1 malformed TOML, 2 missing/unreadable file, 3 schema violation.
    """

    def _error(kind: str, message: str, code: int, **extra: Any) -> tuple[dict[str, Any], int, None]:
        payload = {"type": kind, "message": message, **extra}
        return {"status": "error", "config_path": str(path), "error": payload}, code, None

    try:
        config = load_config(config_cls, path)
    except FileNotFoundError as exc:
        return _error("missing_file", str(exc), 2)
    except PermissionError as exc:
        return _error("permission_error", str(exc), 2)
    except ValidationError as exc:
        details = [
            {
                "loc": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        return _error("validation_error", "Configuration validation failed", 3, details=details)
    except ValueError as exc:
        return _error("invalid_format", str(exc), 1)
    except Exception as exc:  # pragma: no cover - unexpected failures
        raise ConfigInspectionError("Unexpected configuration inspection error") from exc

    result = {"status": "ok", "config_path": str(path), "warnings": _collect_warnings(config)}
    return result, 0, config


def explain_config(*, config_cls: type[BaseModel] = AppConfig) -> list[dict[str, Any]]:
    """Flatten the configuration schema into documented field entries."""

    documentation: list[dict[str, Any]] = []

    def _walk(model_cls: type[BaseModel], prefix: str) -> None:
        for field_name, field in model_cls.model_fields.items():
            name = f"{prefix}{field_name}"
            documentation.append(
                {
                    "name": name,
                    "type": _format_annotation(field.annotation),
                    "required": field.is_required(),
                    "default": _format_default(field),
                    "description": field.description or "",
                }
            )
            for nested in _nested_models(field.annotation):
                _walk(nested, f"{name}.")

    _walk(config_cls, "")
    return documentation


def _collect_warnings(config: AppConfig) -> list[str]:
    warnings: list[str] = []
    if config.store is None:
        warnings.append("No [store] block configured; fetch and generate commands are unavailable")
    if config.generation is None:
        warnings.append("No [generation] block configured; remote digest generation is disabled")
    if config.scheduler and config.scheduler.enabled and config.scheduler.generation_job is None:
        warnings.append("Scheduler is enabled but no generation_job is configured")
    return warnings


def _format_annotation(annotation: Any) -> str:
    origin = get_origin(annotation)
    if origin is None:
        return annotation.__name__ if isinstance(annotation, type) else repr(annotation).replace("typing.", "")

    args = get_args(annotation)
    if origin in {Union, UnionType}:
        non_none = [arg for arg in args if arg is not type(None)]
        if len(non_none) == 1:
            return f"Optional[{_format_annotation(non_none[0])}]"
        return f"Union[{', '.join(_format_annotation(arg) for arg in args)}]"

    origin_name = getattr(origin, "__name__", str(origin))
    if args:
        return f"{origin_name}[{', '.join(_format_annotation(arg) for arg in args)}]"
    return origin_name


def _format_default(field: FieldInfo) -> Any:
    if field.is_required():
        return None
    value = field.default_factory() if field.default_factory is not None else field.default
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Path):
        return str(value)
    return value


def _nested_models(annotation: Any) -> list[type[BaseModel]]:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return [annotation]
    return [arg for arg in get_args(annotation) if isinstance(arg, type) and issubclass(arg, BaseModel)]


__all__ = ["check_config", "explain_config", "ConfigInspectionError"]
