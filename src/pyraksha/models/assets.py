"""Request/response models used by the asset cache controller."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyraksha.models._base import utcnow


class AssetRequest(BaseModel):
    """A resource request intercepted by the cache controller.

    ``mode == "navigate"`` or ``destination == "document"`` marks a page
    navigation, which falls back to the cached root document when offline.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = "GET"
    mode: str = "no-cors"
    destination: str = ""
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def is_navigation(self) -> bool:
        return self.mode == "navigate" or self.destination == "document"

    @classmethod
    def navigate(cls, url: str) -> AssetRequest:
        return cls(url=url, mode="navigate", destination="document")


class CachedResponse(BaseModel):
    """A response as returned to the page, cached or live."""

    model_config = ConfigDict(frozen=True)

    url: str
    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""
    from_cache: bool = False
    cached_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def as_cached(self) -> CachedResponse:
        """Copy stamped for storage in a cache."""
        return self.model_copy(update={"from_cache": True, "cached_at": utcnow()})

    def json_body(self) -> Any:
        return json.loads(self.body.decode("utf-8"))
