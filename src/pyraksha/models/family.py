"""Family members whose location and safety status a user tracks."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from pyraksha.models._base import RakshaBaseModel, RakshaRecord


class FamilyMemberCreate(RakshaBaseModel):
    """Body of ``POST /family-members``."""

    user_id: int = Field(gt=0)
    name: str
    phone: str
    relationship: str
    location: str | None = None

    @field_validator("name", "phone", "relationship")
    @classmethod
    def _required_text(cls, value: str) -> str:
        if not value:
            raise ValueError("must be non-empty")
        return value


class FamilyMemberStatusUpdate(RakshaBaseModel):
    """Body of ``PUT /family-members/{id}/status`` plus the member id."""

    member_id: int = Field(gt=0)
    status: str
    location: str | None = None

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"status": self.status}
        if self.location:
            body["location"] = self.location
        return body


class FamilyMember(RakshaRecord):
    id: int
    user_id: int | None = None
    name: str
    phone: str = ""
    relationship: str = ""
    location: str | None = None
    safety_status: str = "safe"
    last_update: datetime | None = None
