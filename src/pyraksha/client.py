"""High-level async client for the Raksha Sahayak backend."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

import aiohttp
from pydantic import ValidationError

from pyraksha._api import alerts as _alerts_api
from pyraksha._api import family as _family_api
from pyraksha._api import incidents as _incidents_api
from pyraksha._api import recommendations as _recommendations_api
from pyraksha._api import users as _users_api
from pyraksha._constants import LOCATION_UNAVAILABLE
from pyraksha._transport import HttpTransport, Transport
from pyraksha.config import RakshaConfig
from pyraksha.emergency import LongPressTrigger
from pyraksha.exceptions import RakshaError, RakshaTransportError, RakshaValidationError
from pyraksha.models.family import FamilyMember, FamilyMemberCreate, FamilyMemberStatusUpdate
from pyraksha.models.mutations import (
    IncidentCreate,
    MutationKind,
    MutationPayload,
    validate_payload,
)
from pyraksha.models.recommendation import SafetyRecommendation
from pyraksha.models.records import EmergencyAlert, Incident, IncidentStatus, OfflineReceipt, UserRecord
from pyraksha.offline.connectivity import ConnectivityMonitor, ConnectivityObserver, Reachability
from pyraksha.offline.queue import MutationQueue
from pyraksha.offline.replay import DrainOutcome, ReplayEngine
from pyraksha.offline.storage import JsonFileStore, KeyValueStore, MemoryStore, SnapshotStore
from pyraksha.recommendations import RecommendationService

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def _always_online() -> bool:
    return True


class RakshaClient:
    """Async client with an offline write path.

    Writes are sent directly.  When a write fails at the network level while
    the connectivity monitor reports offline, it is queued and an
    :class:`OfflineReceipt` is returned instead of the created record; the
    queue is replayed on the next offline-to-online transition.

    Usage::

        async with RakshaClient(config, reachability=is_reachable) as client:
            result = await client.report_incident(user_id=7, type="harassment", ...)
            ...
            client.connectivity.handle_online()
    """

    def __init__(
        self,
        config: RakshaConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        store: KeyValueStore | None = None,
        reachability: Reachability = _always_online,
        recommendations: RecommendationService | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = None
        self._recommendations = recommendations

        if store is None:
            store = JsonFileStore(config.queue_path) if config.queue_path else MemoryStore()
        self._queue = MutationQueue(
            SnapshotStore(store, config.storage_key),
            max_items_per_bucket=config.max_items_per_bucket,
        )
        self._replay: ReplayEngine | None = None
        self._monitor = ConnectivityMonitor(reachability, on_online=self.sync_offline_data)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RakshaClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        self._replay = ReplayEngine(
            self._queue,
            self._transport,
            max_attempts=self._config.max_attempts,
            max_age=self._config.max_age,
        )
        if self._recommendations is None:
            self._recommendations = RecommendationService.from_config(self._config, self._http_session)
        self._monitor.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self._monitor.stop()
        await self._monitor.wait_idle()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None
        self._replay = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> RakshaConfig:
        return self._config

    @property
    def queue(self) -> MutationQueue:
        return self._queue

    @property
    def connectivity(self) -> ConnectivityMonitor:
        return self._monitor

    @property
    def is_online(self) -> bool:
        return self._monitor.is_online

    def subscribe_connectivity(self, observer: ConnectivityObserver) -> Callable[[], None]:
        return self._monitor.subscribe(observer)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise RakshaError("Client not initialized. Use 'async with RakshaClient(...) as client:'")
        return self._transport

    async def _submit(
        self,
        kind: MutationKind,
        payload: MutationPayload,
        send: Callable[[Transport, Any], Awaitable[T]],
    ) -> T | OfflineReceipt:
        """Send *payload* directly, queueing it if the network is down while offline."""
        transport = self._require_transport()
        try:
            return await send(transport, payload)
        except RakshaTransportError:
            if self._monitor.is_online:
                raise
            _logger.info("Offline; queueing %s for later sync", kind.value, exc_info=True)
        entry = self._queue.enqueue(kind, payload)
        return OfflineReceipt(mutation_id=entry.id, kind=kind.value)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def report_incident(self, payload: IncidentCreate | None = None, **fields: Any) -> Incident | OfflineReceipt:
        """Report an incident (``POST /incidents``)."""
        validated = validate_payload(MutationKind.INCIDENT_CREATE, payload if payload is not None else fields)
        return await self._submit(MutationKind.INCIDENT_CREATE, validated, _incidents_api.create_incident)

    async def update_status(
        self,
        user_id: int,
        status: str,
        location: str | None = None,
    ) -> UserRecord | OfflineReceipt:
        """Refresh the user's safety status (``PUT /users/{id}/status``)."""
        validated = validate_payload(
            MutationKind.STATUS_UPDATE,
            {"user_id": user_id, "status": status, "location": location},
        )
        return await self._submit(MutationKind.STATUS_UPDATE, validated, _users_api.update_user_status)

    async def send_emergency_alert(
        self,
        user_id: int,
        location: str | None,
        alerted_contacts: Sequence[str] = (),
    ) -> EmergencyAlert | OfflineReceipt:
        """Raise an emergency alert (``POST /emergency-alerts``)."""
        validated = validate_payload(
            MutationKind.EMERGENCY_ALERT_CREATE,
            {
                "user_id": user_id,
                "location": location or LOCATION_UNAVAILABLE,
                "alerted_contacts": list(alerted_contacts),
            },
        )
        return await self._submit(MutationKind.EMERGENCY_ALERT_CREATE, validated, _alerts_api.create_emergency_alert)

    def emergency_trigger(
        self,
        user_id: int,
        *,
        alerted_contacts: Sequence[str] = (),
        location: Callable[[], str | None] | None = None,
        **kwargs: Any,
    ) -> LongPressTrigger:
        """Build a press-and-hold trigger that sends an alert for *user_id*.

        *location* is read when the alert fires, not when it is armed.
        """

        async def _send() -> EmergencyAlert | OfflineReceipt:
            where = location() if location is not None else None
            return await self.send_emergency_alert(user_id, where, alerted_contacts)

        kwargs.setdefault("hold_seconds", self._config.long_press_seconds)
        return LongPressTrigger(_send, **kwargs)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_incidents(self) -> list[Incident]:
        return await _incidents_api.list_incidents(self._require_transport())

    async def get_user_incidents(self, user_id: int) -> list[Incident]:
        return await _incidents_api.list_user_incidents(self._require_transport(), user_id)

    async def update_incident_status(self, incident_id: int, status: IncidentStatus | str) -> Incident:
        return await _incidents_api.update_incident_status(self._require_transport(), incident_id, status)

    async def get_user(self, user_id: int) -> UserRecord:
        return await _users_api.get_user(self._require_transport(), user_id)

    async def get_active_alerts(self) -> list[EmergencyAlert]:
        return await _alerts_api.list_active_alerts(self._require_transport())

    async def resolve_emergency_alert(self, alert_id: int) -> EmergencyAlert:
        return await _alerts_api.resolve_emergency_alert(self._require_transport(), alert_id)

    async def get_saved_recommendations(self, user_id: int) -> list[SafetyRecommendation]:
        return await _recommendations_api.list_saved_recommendations(self._require_transport(), user_id)

    # ------------------------------------------------------------------
    # Family tracking (online only, never queued)
    # ------------------------------------------------------------------

    async def get_family_members(self, user_id: int) -> list[FamilyMember]:
        return await _family_api.list_family_members(self._require_transport(), user_id)

    async def add_family_member(self, payload: FamilyMemberCreate | None = None, **fields: Any) -> FamilyMember:
        """Start tracking a family member (``POST /family-members``)."""
        if payload is None:
            try:
                payload = FamilyMemberCreate.model_validate(fields)
            except ValidationError as exc:
                raise RakshaValidationError(f"invalid family member: {exc}") from exc
        return await _family_api.add_family_member(self._require_transport(), payload)

    async def update_family_member_status(
        self,
        member_id: int,
        status: str,
        location: str | None = None,
    ) -> FamilyMember:
        try:
            payload = FamilyMemberStatusUpdate(member_id=member_id, status=status, location=location)
        except ValidationError as exc:
            raise RakshaValidationError(f"invalid family member status: {exc}") from exc
        return await _family_api.update_family_member_status(self._require_transport(), payload)

    # ------------------------------------------------------------------
    # Offline sync
    # ------------------------------------------------------------------

    async def sync_offline_data(self) -> DrainOutcome:
        """Replay everything queued now (also run on reconnect)."""
        if self._replay is None:
            raise RakshaError("Client not initialized. Use 'async with RakshaClient(...) as client:'")
        return await self._replay.drain()

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def _require_recommendations(self) -> RecommendationService:
        if self._recommendations is None:
            self._recommendations = RecommendationService()
        return self._recommendations

    async def recommendations(self, location: str, recent_incidents: Sequence[Any] = ()) -> list[SafetyRecommendation]:
        return await self._require_recommendations().generate(location, recent_incidents)

    async def analyze_safety_context(self, location: str, time_of_day: str, incident_type: str) -> str:
        return await self._require_recommendations().analyze_context(location, time_of_day, incident_type)
