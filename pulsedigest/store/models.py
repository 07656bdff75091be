"""Records returned by the remote object store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""

    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class StoredObject:
    """A document entry in the object store."""

    id: str
    name: str = ""
    title: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    content_source: str | Mapping[str, Any] | None = None

    @property
    def last_modified(self) -> datetime | None:
        return self.updated_at or self.created_at

    @property
    def search_text(self) -> str:
        return f"{self.name} {self.title}".lower()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "StoredObject":
        properties = payload.get("properties") or {}
        content = payload.get("content") or {}
        return cls(
            id=str(payload.get("id") or ""),
            name=str(payload.get("name") or ""),
            title=str(properties.get("title") or "") if isinstance(properties, Mapping) else "",
            created_at=parse_timestamp(payload.get("created_at")),
            updated_at=parse_timestamp(payload.get("updated_at")),
            content_source=content.get("source") if isinstance(content, Mapping) else None,
        )


__all__ = ["StoredObject", "parse_timestamp"]
