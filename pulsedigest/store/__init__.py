"""Remote object-store access."""

from __future__ import annotations

from .client import StoreClient, StoreRequestError
from .models import StoredObject

__all__ = ["StoreClient", "StoreRequestError", "StoredObject"]
