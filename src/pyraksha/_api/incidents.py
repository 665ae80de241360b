"""Incident endpoints.

Endpoints:
  - POST /incidents                 (report an incident)
  - GET  /incidents                 (authority dashboard listing)
  - GET  /incidents/user/{userId}   (reports filed by one user)
  - PUT  /incidents/{id}/status     (authority review)
"""

from __future__ import annotations

from pyraksha._api._common import expect_list, expect_object
from pyraksha._transport import Transport
from pyraksha.models.mutations import IncidentCreate
from pyraksha.models.records import Incident, IncidentStatus

INCIDENTS_ENDPOINT = "/incidents"


async def create_incident(transport: Transport, payload: IncidentCreate) -> Incident:
    data = await transport.request_json("POST", INCIDENTS_ENDPOINT, payload.to_body())
    return Incident.model_validate(expect_object(data, endpoint=INCIDENTS_ENDPOINT))


async def list_incidents(transport: Transport) -> list[Incident]:
    data = await transport.request_json("GET", INCIDENTS_ENDPOINT)
    return [Incident.model_validate(item) for item in expect_list(data, endpoint=INCIDENTS_ENDPOINT)]


async def list_user_incidents(transport: Transport, user_id: int) -> list[Incident]:
    endpoint = f"{INCIDENTS_ENDPOINT}/user/{int(user_id)}"
    data = await transport.request_json("GET", endpoint)
    return [Incident.model_validate(item) for item in expect_list(data, endpoint=endpoint)]


async def update_incident_status(transport: Transport, incident_id: int, status: IncidentStatus | str) -> Incident:
    endpoint = f"{INCIDENTS_ENDPOINT}/{int(incident_id)}/status"
    data = await transport.request_json("PUT", endpoint, {"status": str(IncidentStatus(status))})
    return Incident.model_validate(expect_object(data, endpoint=endpoint))
