"""User endpoints.

Endpoints:
  - GET /users/{id}          (profile and current safety status)
  - PUT /users/{id}/status   (refresh status, optionally location)
"""

from __future__ import annotations

from pyraksha._api._common import expect_object
from pyraksha._transport import Transport
from pyraksha.models.mutations import StatusUpdate
from pyraksha.models.records import UserRecord


def status_endpoint(user_id: int) -> str:
    return f"/users/{int(user_id)}/status"


async def get_user(transport: Transport, user_id: int) -> UserRecord:
    endpoint = f"/users/{int(user_id)}"
    data = await transport.request_json("GET", endpoint)
    return UserRecord.model_validate(expect_object(data, endpoint=endpoint))


async def update_user_status(transport: Transport, payload: StatusUpdate) -> UserRecord:
    endpoint = status_endpoint(payload.user_id)
    data = await transport.request_json("PUT", endpoint, payload.to_body())
    return UserRecord.model_validate(expect_object(data, endpoint=endpoint))
