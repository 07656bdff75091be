"""Remote object-store / generation API configuration."""

from __future__ import annotations

from pydantic import Field, field_validator

from pulsedigest.config.base import BaseConfig, resolve_env_reference


class StoreConfig(BaseConfig):
    """Connection settings for the remote digest API."""

    base_url: str = Field(..., description="API base URL, e.g. https://api.example.com/api/v1")
    api_key: str = Field(..., description="Bearer token, can use 'env:VAR_NAME' format")
    timeout: float = Field(30.0, gt=0, description="Per-request timeout in seconds")
    max_retries: int = Field(3, ge=1, description="Attempts per request before giving up")
    retry_delay: float = Field(2.0, ge=0, description="Delay between retries in seconds")
    page_limit: int = Field(1000, ge=1, description="Number of objects requested when listing")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def api_key_secret(self) -> str:
        """Return the API key with any ``env:VAR`` reference expanded."""

        return resolve_env_reference(self.api_key) or ""


__all__ = ["StoreConfig"]
