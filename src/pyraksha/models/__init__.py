"""Data models for queued mutations, backend records and cached assets."""

from pyraksha.models._base import RakshaBaseModel, RakshaRecord
from pyraksha.models.assets import AssetRequest, CachedResponse
from pyraksha.models.family import FamilyMember, FamilyMemberCreate, FamilyMemberStatusUpdate
from pyraksha.models.mutations import (
    PAYLOAD_MODELS,
    EmergencyAlertCreate,
    IncidentCreate,
    IncidentType,
    MutationKind,
    MutationPayload,
    QueuedEmergencyAlert,
    QueuedIncident,
    QueuedMutation,
    QueuedStatusUpdate,
    StatusUpdate,
    Urgency,
    new_queued_mutation,
    validate_payload,
)
from pyraksha.models.recommendation import Priority, RecommendationType, SafetyRecommendation
from pyraksha.models.records import (
    AlertStatus,
    EmergencyAlert,
    Incident,
    IncidentStatus,
    OfflineReceipt,
    UserRecord,
)
from pyraksha.models.snapshot import BUCKET_FIELDS, MutationQueueSnapshot

__all__ = [
    "AlertStatus",
    "AssetRequest",
    "BUCKET_FIELDS",
    "CachedResponse",
    "EmergencyAlert",
    "EmergencyAlertCreate",
    "FamilyMember",
    "FamilyMemberCreate",
    "FamilyMemberStatusUpdate",
    "Incident",
    "IncidentCreate",
    "IncidentStatus",
    "IncidentType",
    "MutationKind",
    "MutationPayload",
    "MutationQueueSnapshot",
    "OfflineReceipt",
    "PAYLOAD_MODELS",
    "Priority",
    "QueuedEmergencyAlert",
    "QueuedIncident",
    "QueuedMutation",
    "QueuedStatusUpdate",
    "RakshaBaseModel",
    "RakshaRecord",
    "RecommendationType",
    "SafetyRecommendation",
    "StatusUpdate",
    "Urgency",
    "UserRecord",
    "new_queued_mutation",
    "validate_payload",
]
