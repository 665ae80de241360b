"""Stored recommendation endpoint.

Endpoints:
  - GET /recommendations/{userId}   (recommendations saved for a user)
"""

from __future__ import annotations

from pyraksha._api._common import expect_list
from pyraksha._transport import Transport
from pyraksha.models.recommendation import SafetyRecommendation


async def list_saved_recommendations(transport: Transport, user_id: int) -> list[SafetyRecommendation]:
    endpoint = f"/recommendations/{int(user_id)}"
    data = await transport.request_json("GET", endpoint)
    return [SafetyRecommendation.model_validate(item) for item in expect_list(data, endpoint=endpoint)]
