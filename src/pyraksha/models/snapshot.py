"""Queue snapshot grouped by mutation kind."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import ConfigDict, Field, model_validator

from pyraksha.models._base import RakshaBaseModel
from pyraksha.models.mutations import (
    MutationKind,
    QueuedEmergencyAlert,
    QueuedIncident,
    QueuedStatusUpdate,
)

#: Snapshot attribute holding each kind's bucket.
BUCKET_FIELDS: dict[MutationKind, str] = {
    MutationKind.INCIDENT_CREATE: "incidents",
    MutationKind.STATUS_UPDATE: "status_updates",
    MutationKind.EMERGENCY_ALERT_CREATE: "emergency_alerts",
}

_BUCKET_ALIASES: dict[str, MutationKind] = {
    "incidents": MutationKind.INCIDENT_CREATE,
    "statusUpdates": MutationKind.STATUS_UPDATE,
    "emergencyAlerts": MutationKind.EMERGENCY_ALERT_CREATE,
}


def _upgrade_legacy_entry(kind: MutationKind, entry: Any) -> Any:
    """Wrap a flat ``{...payload, timestamp}`` entry into a queue entry.

    Older clients persisted bare request bodies with a ``timestamp`` field
    instead of ``{kind, id, payload, enqueuedAt}`` records.
    """
    if not isinstance(entry, dict) or "payload" in entry:
        return entry
    payload = dict(entry)
    timestamp = payload.pop("timestamp", None)
    upgraded: dict[str, Any] = {"kind": kind.value, "payload": payload}
    if timestamp is not None:
        upgraded["enqueuedAt"] = timestamp
    return upgraded


class MutationQueueSnapshot(RakshaBaseModel):
    """All queued mutations at a point in time.

    Buckets keep enqueue order.  The snapshot is a staging area owned by the
    local store of one device; it is never synced as a whole.
    """

    model_config = ConfigDict(frozen=False)

    incidents: list[QueuedIncident] = Field(default_factory=list)
    status_updates: list[QueuedStatusUpdate] = Field(default_factory=list)
    emergency_alerts: list[QueuedEmergencyAlert] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        upgraded = dict(values)
        for alias, kind in _BUCKET_ALIASES.items():
            for key in (alias, BUCKET_FIELDS[kind]):
                bucket = upgraded.get(key)
                if isinstance(bucket, list):
                    upgraded[key] = [_upgrade_legacy_entry(kind, entry) for entry in bucket]
        return upgraded

    @classmethod
    def empty(cls) -> MutationQueueSnapshot:
        return cls()

    def bucket(self, kind: MutationKind) -> list[Any]:
        """Return the (mutable) bucket holding entries of *kind*."""
        return getattr(self, BUCKET_FIELDS[MutationKind(kind)])

    def iter_all(self) -> Iterator[QueuedIncident | QueuedStatusUpdate | QueuedEmergencyAlert]:
        for kind in MutationKind:
            yield from self.bucket(kind)

    @property
    def total(self) -> int:
        return len(self.incidents) + len(self.status_updates) + len(self.emergency_alerts)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def to_storage(self) -> dict[str, Any]:
        """Serialize with camelCase bucket names for the durable store."""
        return self.model_dump(mode="json", by_alias=True)
