"""Web application configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from pulsedigest.config.base import BaseConfig, resolve_env_reference


class WebAuthConfig(BaseConfig):
    """Header token protection for the digest API."""

    enabled: bool = Field(False, description="Whether header token authentication is enforced.")
    header_name: str = Field(
        "X-Pulse-Token", min_length=1, description="Header carrying the shared token."
    )
    token: str | None = Field(
        default=None,
        description="Shared secret, can use 'env:VAR_NAME' format. Required when enabled.",
    )

    @field_validator("token")
    @classmethod
    def _blank_to_none(cls, token: str | None) -> str | None:
        if token is None:
            return None
        return token.strip() or None

    @model_validator(mode="after")
    def _require_token(self) -> "WebAuthConfig":
        if self.enabled and not self.token:
            raise ValueError("Authentication token must be provided when web auth is enabled.")
        return self

    @property
    def token_secret(self) -> str:
        return resolve_env_reference(self.token) or ""


class WebUIConfig(BaseConfig):
    """Settings for the FastAPI digest page and API."""

    enabled: bool = Field(True, description="Whether to serve the rendered HTML digest page.")
    title: str = Field("Portfolio Pulse", min_length=1, description="Page heading above the digest.")
    auth: WebAuthConfig | None = Field(
        default=None, description="Token authentication for mutating and listing endpoints."
    )


__all__ = ["WebAuthConfig", "WebUIConfig"]
