"""Family tracking endpoints.

Endpoints:
  - GET  /family-members/{userId}      (members tracked by a user)
  - POST /family-members               (add a member)
  - PUT  /family-members/{id}/status   (member status, optionally location)
"""

from __future__ import annotations

from pyraksha._api._common import expect_list, expect_object
from pyraksha._transport import Transport
from pyraksha.models.family import FamilyMember, FamilyMemberCreate, FamilyMemberStatusUpdate

FAMILY_ENDPOINT = "/family-members"


async def list_family_members(transport: Transport, user_id: int) -> list[FamilyMember]:
    endpoint = f"{FAMILY_ENDPOINT}/{int(user_id)}"
    data = await transport.request_json("GET", endpoint)
    return [FamilyMember.model_validate(item) for item in expect_list(data, endpoint=endpoint)]


async def add_family_member(transport: Transport, payload: FamilyMemberCreate) -> FamilyMember:
    data = await transport.request_json("POST", FAMILY_ENDPOINT, payload.to_body())
    return FamilyMember.model_validate(expect_object(data, endpoint=FAMILY_ENDPOINT))


async def update_family_member_status(transport: Transport, payload: FamilyMemberStatusUpdate) -> FamilyMember:
    endpoint = f"{FAMILY_ENDPOINT}/{payload.member_id}/status"
    data = await transport.request_json("PUT", endpoint, payload.to_body())
    return FamilyMember.model_validate(expect_object(data, endpoint=endpoint))
