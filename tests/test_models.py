"""Tests for payload validation, queue entries and snapshot parsing."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pyraksha.exceptions import RakshaValidationError
from pyraksha.models import (
    EmergencyAlert,
    EmergencyAlertCreate,
    Incident,
    IncidentCreate,
    IncidentStatus,
    MutationKind,
    MutationQueueSnapshot,
    QueuedIncident,
    QueuedStatusUpdate,
    StatusUpdate,
    new_queued_mutation,
    validate_payload,
)


def _incident(**overrides: object) -> dict:
    payload = {
        "userId": 7,
        "type": "harassment",
        "description": "Followed near the bus stand",
        "location": "Pune",
        "urgency": "high",
    }
    payload.update(overrides)
    return payload


# ------------------------------------------------------------------
# Payloads
# ------------------------------------------------------------------


class TestPayloads:
    def test_incident_accepts_camel_and_snake_case(self) -> None:
        camel = validate_payload(MutationKind.INCIDENT_CREATE, _incident())
        snake = validate_payload(
            MutationKind.INCIDENT_CREATE,
            {
                "user_id": 7,
                "type": "harassment",
                "description": "Followed near the bus stand",
                "location": "Pune",
                "urgency": "high",
            },
        )
        assert camel == snake
        assert isinstance(camel, IncidentCreate)

    def test_incident_body_is_camel_case(self) -> None:
        payload = validate_payload(MutationKind.INCIDENT_CREATE, _incident(evidence=["photo-1"]))
        assert payload.to_body() == {
            "userId": 7,
            "type": "harassment",
            "description": "Followed near the bus stand",
            "location": "Pune",
            "urgency": "high",
            "evidence": ["photo-1"],
        }

    @pytest.mark.parametrize(
        "overrides",
        [
            {"userId": 0},
            {"userId": None},
            {"description": "   "},
            {"location": ""},
            {"type": "burglary"},
            {"urgency": "whenever"},
        ],
    )
    def test_incident_rejects_invalid(self, overrides: dict) -> None:
        with pytest.raises(RakshaValidationError):
            validate_payload(MutationKind.INCIDENT_CREATE, _incident(**overrides))

    def test_user_id_is_required(self) -> None:
        payload = _incident()
        del payload["userId"]
        with pytest.raises(RakshaValidationError):
            validate_payload(MutationKind.INCIDENT_CREATE, payload)

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_payload(MutationKind.STATUS_UPDATE, {"userId": 1, "status": ""})

    def test_status_update_body_excludes_user_id(self) -> None:
        update = StatusUpdate(user_id=3, status="safe")
        assert update.to_body() == {"status": "safe"}
        located = StatusUpdate(user_id=3, status="unsafe", location="Nashik")
        assert located.to_body() == {"status": "unsafe", "location": "Nashik"}

    def test_emergency_alert_body(self) -> None:
        alert = EmergencyAlertCreate(user_id=1, location="Satara", alerted_contacts=["+919876543211"])
        assert alert.to_body() == {
            "userId": 1,
            "location": "Satara",
            "alertedContacts": ["+919876543211"],
        }

    def test_wrong_model_for_kind_is_rejected(self) -> None:
        update = StatusUpdate(user_id=3, status="safe")
        with pytest.raises(RakshaValidationError):
            validate_payload(MutationKind.INCIDENT_CREATE, update)


# ------------------------------------------------------------------
# Queue entries and snapshots
# ------------------------------------------------------------------


class TestQueuedMutation:
    def test_new_entry_defaults(self) -> None:
        entry = new_queued_mutation(MutationKind.STATUS_UPDATE, {"userId": 2, "status": "safe"})
        assert isinstance(entry, QueuedStatusUpdate)
        assert entry.kind == "status_update"
        assert entry.attempts == 0
        assert entry.last_error is None
        assert entry.enqueued_at.tzinfo is not None
        assert len(entry.id) == 32

    def test_ids_are_unique(self) -> None:
        first = new_queued_mutation(MutationKind.INCIDENT_CREATE, _incident())
        second = new_queued_mutation(MutationKind.INCIDENT_CREATE, _incident())
        assert first.id != second.id


class TestSnapshot:
    def test_round_trip_keeps_kinds_and_order(self) -> None:
        snapshot = MutationQueueSnapshot.empty()
        first = new_queued_mutation(MutationKind.INCIDENT_CREATE, _incident(description="first"))
        second = new_queued_mutation(MutationKind.INCIDENT_CREATE, _incident(description="second"))
        snapshot.incidents.extend([first, second])

        stored = snapshot.to_storage()
        assert set(stored) == {"incidents", "statusUpdates", "emergencyAlerts"}
        assert stored["incidents"][0]["payload"]["userId"] == 7

        restored = MutationQueueSnapshot.model_validate(stored)
        assert [item.payload.description for item in restored.incidents] == ["first", "second"]
        assert restored.total == 2

    def test_legacy_flat_entries_are_upgraded(self) -> None:
        legacy = {
            "incidents": [{**_incident(), "timestamp": "2025-06-01T10:00:00Z"}],
            "statusUpdates": [{"userId": 4, "status": "safe", "timestamp": "2025-06-01T10:05:00Z"}],
            "emergencyAlerts": [],
        }

        snapshot = MutationQueueSnapshot.model_validate(legacy)

        assert isinstance(snapshot.incidents[0], QueuedIncident)
        assert snapshot.incidents[0].enqueued_at == datetime(2025, 6, 1, 10, 0, tzinfo=UTC)
        assert snapshot.status_updates[0].payload.user_id == 4
        assert snapshot.emergency_alerts == []

    def test_empty_snapshot(self) -> None:
        snapshot = MutationQueueSnapshot.empty()
        assert snapshot.is_empty
        assert list(snapshot.iter_all()) == []


# ------------------------------------------------------------------
# Backend records
# ------------------------------------------------------------------


class TestRecords:
    def test_incident_defaults_to_pending_and_keeps_raw(self) -> None:
        data = {"id": 11, **_incident(), "reportedAt": "2025-06-01T10:00:00.000Z", "extra": 1}
        incident = Incident.model_validate(data)
        assert incident.status is IncidentStatus.PENDING
        assert incident.user_id == 7
        assert incident.raw["extra"] == 1

    def test_emergency_alert_parses_camel_case(self) -> None:
        alert = EmergencyAlert.model_validate(
            {"id": 5, "userId": 1, "location": "Satara", "status": "active", "alertedContacts": ["+91"]}
        )
        assert alert.alerted_contacts == ["+91"]
