"""Mutation payloads and the queued-mutation tagged union.

Each :class:`MutationKind` owns exactly one payload schema.  Payloads are
validated when they are built (before a direct call and before enqueue),
so a stored queue entry always matches its kind.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import Field, ValidationError, ValidationInfo, field_validator

from pyraksha.exceptions import RakshaValidationError
from pyraksha.models._base import RakshaBaseModel, ensure_utc, utcnow


class MutationKind(enum.StrEnum):
    """Kinds of writes that can be queued while offline."""

    INCIDENT_CREATE = "incident_create"
    STATUS_UPDATE = "status_update"
    EMERGENCY_ALERT_CREATE = "emergency_alert_create"


class IncidentType(enum.StrEnum):
    HARASSMENT = "harassment"
    STALKING = "stalking"
    EMERGENCY = "emergency"
    GENERAL = "general"


class Urgency(enum.StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


def _non_empty(value: str, field_name: str) -> str:
    if not value:
        raise ValueError(f"{field_name} must be non-empty")
    return value


# ------------------------------------------------------------------
# Payloads
# ------------------------------------------------------------------


class _UserScopedPayload(RakshaBaseModel):
    user_id: int = Field(gt=0)
    """Identity of the acting user, supplied by the identity provider."""


class IncidentCreate(_UserScopedPayload):
    """Body of ``POST /incidents``."""

    type: IncidentType
    description: str
    location: str
    urgency: Urgency
    evidence: list[str] = Field(default_factory=list)

    @field_validator("description", "location")
    @classmethod
    def _required_text(cls, value: str, info: ValidationInfo) -> str:
        return _non_empty(value, info.field_name)


class StatusUpdate(_UserScopedPayload):
    """Body of ``PUT /users/{id}/status`` plus the target user id."""

    status: str
    location: str | None = None

    @field_validator("status")
    @classmethod
    def _required_status(cls, value: str) -> str:
        return _non_empty(value, "status")

    def to_body(self) -> dict[str, Any]:
        # user id travels in the path, not the body
        body: dict[str, Any] = {"status": self.status}
        if self.location:
            body["location"] = self.location
        return body


class EmergencyAlertCreate(_UserScopedPayload):
    """Body of ``POST /emergency-alerts``."""

    location: str
    alerted_contacts: list[str] = Field(default_factory=list)

    @field_validator("location")
    @classmethod
    def _required_location(cls, value: str) -> str:
        return _non_empty(value, "location")


MutationPayload = IncidentCreate | StatusUpdate | EmergencyAlertCreate

PAYLOAD_MODELS: dict[MutationKind, type[RakshaBaseModel]] = {
    MutationKind.INCIDENT_CREATE: IncidentCreate,
    MutationKind.STATUS_UPDATE: StatusUpdate,
    MutationKind.EMERGENCY_ALERT_CREATE: EmergencyAlertCreate,
}


def validate_payload(kind: MutationKind, payload: Any) -> MutationPayload:
    """Validate *payload* against the schema of *kind*.

    Accepts either an instance of the kind's model or a mapping (camelCase
    or snake_case keys).  Raises :class:`RakshaValidationError` on mismatch.
    """
    model = PAYLOAD_MODELS[MutationKind(kind)]
    if isinstance(payload, model):
        return payload  # type: ignore[return-value]
    if isinstance(payload, RakshaBaseModel):
        raise RakshaValidationError(f"{type(payload).__name__} is not a valid payload for {kind}")
    try:
        return model.model_validate(payload)  # type: ignore[return-value]
    except ValidationError as exc:
        raise RakshaValidationError(f"invalid {kind} payload: {exc}") from exc


# ------------------------------------------------------------------
# Queue entries
# ------------------------------------------------------------------


class _QueuedBase(RakshaBaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    enqueued_at: datetime = Field(default_factory=utcnow)
    attempts: int = Field(default=0, ge=0)
    last_error: str | None = None

    @field_validator("enqueued_at")
    @classmethod
    def _tz_aware(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class QueuedIncident(_QueuedBase):
    kind: Literal["incident_create"] = "incident_create"
    payload: IncidentCreate


class QueuedStatusUpdate(_QueuedBase):
    kind: Literal["status_update"] = "status_update"
    payload: StatusUpdate


class QueuedEmergencyAlert(_QueuedBase):
    kind: Literal["emergency_alert_create"] = "emergency_alert_create"
    payload: EmergencyAlertCreate


QueuedMutation = Annotated[
    Union[QueuedIncident, QueuedStatusUpdate, QueuedEmergencyAlert],
    Field(discriminator="kind"),
]

_QUEUED_MODELS: dict[MutationKind, type[_QueuedBase]] = {
    MutationKind.INCIDENT_CREATE: QueuedIncident,
    MutationKind.STATUS_UPDATE: QueuedStatusUpdate,
    MutationKind.EMERGENCY_ALERT_CREATE: QueuedEmergencyAlert,
}


def new_queued_mutation(kind: MutationKind, payload: Any) -> QueuedIncident | QueuedStatusUpdate | QueuedEmergencyAlert:
    """Validate *payload* and wrap it in the queue entry of its kind."""
    validated = validate_payload(kind, payload)
    model = _QUEUED_MODELS[MutationKind(kind)]
    return model(payload=validated)  # type: ignore[return-value]
