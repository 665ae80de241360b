"""Replay queued mutations against the backend."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from pyraksha._api.replay import send_mutation
from pyraksha._redact import redact_for_log
from pyraksha._transport import Transport
from pyraksha.models._base import utcnow
from pyraksha.models.mutations import MutationKind
from pyraksha.offline.queue import MutationQueue, QueueEntry

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrainOutcome:
    """Ids of entries handled by one drain."""

    succeeded: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    expired: tuple[str, ...] = ()
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failed)


class ReplayEngine:
    """Drain the queue bucket by bucket, one awaited call at a time.

    Only entries that were delivered are removed.  A failing entry stays
    queued with its attempt count bumped until it runs out of attempts or
    grows older than ``max_age``; then it is dropped with a warning.
    """

    def __init__(
        self,
        queue: MutationQueue,
        transport: Transport,
        *,
        max_attempts: int | None = None,
        max_age: float | timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._queue = queue
        self._transport = transport
        self._max_attempts = max_attempts
        if isinstance(max_age, (int, float)):
            max_age = timedelta(seconds=max_age)
        self._max_age = max_age
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def is_draining(self) -> bool:
        return self._lock.locked()

    async def drain(self) -> DrainOutcome:
        """Replay everything currently queued.

        Concurrent calls wait for the running drain and then replay
        whatever is left.  Never raises for a single failed entry.
        """
        async with self._lock:
            return await self._drain_locked()

    async def _drain_locked(self) -> DrainOutcome:
        snapshot = self._queue.snapshot()
        if snapshot.is_empty:
            return DrainOutcome()

        _logger.info("Replaying %d queued mutations", snapshot.total)
        succeeded: list[str] = []
        expired: list[str] = []
        errors: dict[str, str] = {}

        for kind in MutationKind:
            for entry in list(snapshot.bucket(kind)):
                if self._is_stale(entry):
                    _logger.warning(
                        "Dropping queued %s mutation %s after %d attempts (queued %s)",
                        entry.kind,
                        entry.id,
                        entry.attempts,
                        entry.enqueued_at.isoformat(),
                    )
                    expired.append(entry.id)
                    continue
                try:
                    await send_mutation(self._transport, entry.payload)
                except Exception as exc:
                    _logger.warning(
                        "Replay of %s mutation %s failed: %s",
                        entry.kind,
                        entry.id,
                        exc,
                        exc_info=True,
                    )
                    _logger.debug("Failed payload: %s", redact_for_log(entry.payload.to_body()))
                    error = str(exc) or type(exc).__name__
                    errors[entry.id] = error
                    if self._exhausted(entry.attempts + 1):
                        expired.append(entry.id)
                    continue
                succeeded.append(entry.id)

        failed = {entry_id: err for entry_id, err in errors.items() if entry_id not in expired}
        self._queue.settle(succeeded=succeeded, failed=failed, expired=expired)

        outcome = DrainOutcome(
            succeeded=tuple(succeeded),
            failed=tuple(failed),
            expired=tuple(expired),
            errors=errors,
        )
        _logger.info(
            "Replay finished: %d succeeded, %d failed, %d expired",
            len(outcome.succeeded),
            len(outcome.failed),
            len(outcome.expired),
        )
        return outcome

    def _exhausted(self, attempts: int) -> bool:
        return self._max_attempts is not None and attempts >= self._max_attempts

    def _is_stale(self, entry: QueueEntry) -> bool:
        if self._exhausted(entry.attempts):
            return True
        if self._max_age is None:
            return False
        return self._clock() - entry.enqueued_at > self._max_age
