"""HTTP client for the remote object store and generation API."""

from __future__ import annotations

import time
from typing import Any, Mapping
from urllib.parse import quote

import requests
from loguru import logger

from pulsedigest.config.store import StoreConfig

from .models import StoredObject

USER_AGENT = "pulsedigest/0.1"


class StoreRequestError(RuntimeError):
    """Raised when a request to the remote API fails for good."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StoreClient:
    """Thin wrapper over the remote REST API used to generate and fetch digests."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            }
        )

    @classmethod
    def from_config(cls, config: StoreConfig, *, session: requests.Session | None = None) -> "StoreClient":
        return cls(
            config.base_url,
            config.api_key_secret,
            timeout=config.timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            session=session,
        )

    # ------------------------------------------------------------------
    def list_objects(self, limit: int = 1000, offset: int = 0) -> list[StoredObject]:
        """List stored documents; accepts bare-list and ``{"objects": [...]}`` payloads."""

        payload = self.call("GET", "/objects", params={"limit": limit, "offset": offset})
        if isinstance(payload, Mapping):
            payload = payload.get("objects") or []
        if not isinstance(payload, list):
            raise StoreRequestError("Unexpected payload when listing objects")
        return [StoredObject.from_payload(item) for item in payload if isinstance(item, Mapping)]

    def get_object(self, object_id: str) -> StoredObject:
        if not object_id:
            raise ValueError("Object ID required")
        payload = self.call("GET", f"/objects/{quote(object_id, safe='')}")
        if not isinstance(payload, Mapping):
            raise StoreRequestError(f"Unexpected payload for object {object_id}")
        return StoredObject.from_payload(payload)

    def get_download_url(self, file_ref: str, format: str = "original") -> str:  # noqa: A002 - API field name
        payload = self.call("POST", "/objects/download-url", json={"file": file_ref, "format": format})
        url = payload.get("url") if isinstance(payload, Mapping) else None
        if not url:
            raise StoreRequestError(f"No download URL returned for {file_ref}")
        return str(url)

    def download_text(self, url: str) -> str:
        """Fetch a signed download URL as text, without the API credentials."""

        response = self._send("GET", url, headers={"Authorization": None, "Content-Type": None})
        return response.text

    def execute_async(
        self,
        interaction: str,
        *,
        environment: str,
        model: str,
        data: Mapping[str, Any] | None = None,
    ) -> Any:
        """Start a remote interaction without waiting for it to finish."""

        body = {
            "type": "conversation",
            "interaction": interaction,
            "data": dict(data) if data is not None else {"Task": "begin"},
            "config": {"environment": environment, "model": model},
        }
        return self.call("POST", "/execute/async", json=body)

    # ------------------------------------------------------------------
    def call(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Issue an API request; JSON bodies are decoded, anything else returned as text."""

        response = self._send(method, f"{self.base_url}{endpoint}", **kwargs)
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as exc:
                raise StoreRequestError(f"Invalid JSON from {endpoint}", status_code=response.status_code) from exc
        return response.text

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else None
                if status is not None and status < 500:
                    raise StoreRequestError(
                        f"API call failed: {status} {exc.response.reason}", status_code=status
                    ) from exc
                last_error = exc
            except requests.RequestException as exc:
                last_error = exc

            logger.warning(
                "{} {} failed (attempt {}/{}): {}",
                method,
                url,
                attempt,
                self.max_retries,
                last_error,
            )
            if attempt < self.max_retries and self.retry_delay:
                time.sleep(self.retry_delay)

        logger.error("Max retries reached for {} {}", method, url)
        status = None
        if isinstance(last_error, requests.HTTPError) and last_error.response is not None:
            status = last_error.response.status_code
        raise StoreRequestError(f"API call failed: {last_error}", status_code=status)


__all__ = ["StoreClient", "StoreRequestError"]
