"""Digest generation and lookup configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator

from pulsedigest.config.base import BaseConfig


class GenerationConfig(BaseConfig):
    """Parameters for the asynchronous remote generation call."""

    interaction: str = Field(..., description="Name of the remote interaction that writes the digest")
    environment_id: str = Field(..., description="Remote execution environment identifier")
    model: str = Field(..., description="Model identifier passed to the interaction")
    task: str = Field("begin", description="Value sent as the interaction's 'Task' input")
    wait_seconds: float = Field(
        300.0,
        ge=0,
        description="Seconds to wait after triggering before reloading the latest digest",
    )


class LoaderConfig(BaseConfig):
    """How the latest digest document is located and validated."""

    keywords: list[str] = Field(
        default_factory=lambda: ["digest", "pulse"],
        description="Case-insensitive substrings identifying digest documents by name or title",
    )
    min_content_length: int = Field(
        20, ge=0, description="Minimum trimmed length of document text accepted for parsing"
    )

    @field_validator("keywords")
    @classmethod
    def _normalise_keywords(cls, keywords: list[str]) -> list[str]:
        cleaned = [keyword.strip().lower() for keyword in keywords if keyword.strip()]
        if not cleaned:
            raise ValueError("At least one non-empty digest keyword is required")
        return cleaned


__all__ = ["GenerationConfig", "LoaderConfig"]
