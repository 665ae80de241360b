"""Records returned by the Raksha Sahayak backend."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import Field

from pyraksha.models._base import RakshaRecord


class IncidentStatus(enum.StrEnum):
    PENDING = "pending"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"


class AlertStatus(enum.StrEnum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    FALSE_ALARM = "false_alarm"


class Incident(RakshaRecord):
    """An incident report.  New reports start ``pending``."""

    id: int
    user_id: int | None = None
    type: str
    description: str
    location: str
    urgency: str
    status: IncidentStatus = IncidentStatus.PENDING
    reported_at: datetime | None = None
    resolved_at: datetime | None = None
    evidence: list[str] = Field(default_factory=list)


class UserRecord(RakshaRecord):
    """A user with the safety status shared with family members."""

    id: int
    name: str = ""
    phone: str = ""
    emergency_contacts: list[str] = Field(default_factory=list)
    location: str | None = None
    safety_status: str = "safe"
    last_status_update: datetime | None = None


class EmergencyAlert(RakshaRecord):
    """An emergency alert.  New alerts start ``active``."""

    id: int
    user_id: int | None = None
    location: str
    status: AlertStatus = AlertStatus.ACTIVE
    alerted_contacts: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    resolved_at: datetime | None = None


class OfflineReceipt(RakshaRecord):
    """Returned instead of a record when a write was queued for later sync."""

    success: bool = True
    offline: bool = True
    mutation_id: str
    kind: str
