"""Emergency alert endpoints.

Endpoints:
  - POST /emergency-alerts               (raise an alert)
  - GET  /emergency-alerts               (active alerts)
  - PUT  /emergency-alerts/{id}/resolve  (authority resolution)
"""

from __future__ import annotations

from pyraksha._api._common import expect_list, expect_object
from pyraksha._transport import Transport
from pyraksha.models.mutations import EmergencyAlertCreate
from pyraksha.models.records import EmergencyAlert

ALERTS_ENDPOINT = "/emergency-alerts"


async def create_emergency_alert(transport: Transport, payload: EmergencyAlertCreate) -> EmergencyAlert:
    data = await transport.request_json("POST", ALERTS_ENDPOINT, payload.to_body())
    return EmergencyAlert.model_validate(expect_object(data, endpoint=ALERTS_ENDPOINT))


async def list_active_alerts(transport: Transport) -> list[EmergencyAlert]:
    data = await transport.request_json("GET", ALERTS_ENDPOINT)
    return [EmergencyAlert.model_validate(item) for item in expect_list(data, endpoint=ALERTS_ENDPOINT)]


async def resolve_emergency_alert(transport: Transport, alert_id: int) -> EmergencyAlert:
    endpoint = f"{ALERTS_ENDPOINT}/{int(alert_id)}/resolve"
    data = await transport.request_json("PUT", endpoint)
    return EmergencyAlert.model_validate(expect_object(data, endpoint=endpoint))
