"""Base models shared by payloads, records and queue entries.

Every model inherits from :class:`RakshaBaseModel` which provides:

* ``alias_generator=to_camel`` so the backend's camelCase keys map to
  snake_case fields, while ``populate_by_name`` keeps snake_case input working.
* Whitespace stripping on strings.

Backend records inherit from :class:`RakshaRecord`, which additionally
ignores unknown keys and stashes the original response dict in ``raw``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class RakshaBaseModel(BaseModel):
    """Base for request payloads and locally persisted models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )

    def to_body(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON body the backend expects."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RakshaRecord(RakshaBaseModel):
    """Base for records returned by the backend."""

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        return {**values, "raw": dict(values)}
