"""Re-issue a queued mutation against its endpoint.

Replay sends the stored body verbatim and does not parse the reply: once the
backend accepted the write, a reply that fails model validation must not
keep the item queued (it would be created twice).
"""

from __future__ import annotations

from typing import Any

from pyraksha._api.alerts import ALERTS_ENDPOINT
from pyraksha._api.incidents import INCIDENTS_ENDPOINT
from pyraksha._api.users import status_endpoint
from pyraksha._transport import Transport
from pyraksha.models.mutations import (
    EmergencyAlertCreate,
    IncidentCreate,
    MutationPayload,
    StatusUpdate,
)


def route_for(payload: MutationPayload) -> tuple[str, str]:
    """Return ``(method, endpoint)`` for a mutation payload."""
    if isinstance(payload, IncidentCreate):
        return "POST", INCIDENTS_ENDPOINT
    if isinstance(payload, StatusUpdate):
        return "PUT", status_endpoint(payload.user_id)
    if isinstance(payload, EmergencyAlertCreate):
        return "POST", ALERTS_ENDPOINT
    raise TypeError(f"unsupported mutation payload: {type(payload).__name__}")


async def send_mutation(transport: Transport, payload: MutationPayload) -> Any:
    method, endpoint = route_for(payload)
    return await transport.request_json(method, endpoint, payload.to_body())
