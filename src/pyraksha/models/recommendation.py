"""Safety recommendation model."""

from __future__ import annotations

import enum
from datetime import datetime

from pyraksha.models._base import RakshaRecord


class RecommendationType(enum.StrEnum):
    ROUTE = "route"
    TIME = "time"
    GENERAL = "general"


class Priority(enum.StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SafetyRecommendation(RakshaRecord):
    """A recommendation.  ``id`` and the timestamps are set only on stored ones."""

    type: RecommendationType = RecommendationType.GENERAL
    title: str
    description: str
    priority: Priority = Priority.MEDIUM
    location: str | None = None
    id: int | None = None
    user_id: int | None = None
    valid_until: datetime | None = None
    created_at: datetime | None = None
