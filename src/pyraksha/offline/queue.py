"""Durable queue of writes made while the backend was unreachable.

All state lives in the snapshot store; the queue keeps nothing in memory
between calls, so every operation is a read-modify-write of the stored
snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from typing import Any

from pyraksha.exceptions import RakshaStorageError
from pyraksha.models.mutations import (
    MutationKind,
    QueuedEmergencyAlert,
    QueuedIncident,
    QueuedStatusUpdate,
    new_queued_mutation,
)
from pyraksha.models.snapshot import MutationQueueSnapshot
from pyraksha.offline.storage import SnapshotStore

_logger = logging.getLogger(__name__)

QueueEntry = QueuedIncident | QueuedStatusUpdate | QueuedEmergencyAlert


class MutationQueue:
    """Mutation queue over a :class:`SnapshotStore`.

    Storage failures are never raised to callers: an unreadable store reads
    as empty and a failed write is logged and dropped.
    """

    def __init__(self, storage: SnapshotStore, *, max_items_per_bucket: int | None = None) -> None:
        self._storage = storage
        self._max_items_per_bucket = max_items_per_bucket

    @property
    def storage(self) -> SnapshotStore:
        return self._storage

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> MutationQueueSnapshot:
        """Return everything queued, or an empty snapshot if nothing is readable."""
        try:
            return self._storage.load()
        except RakshaStorageError:
            _logger.warning("Offline queue unreadable; treating as empty", exc_info=True)
            return MutationQueueSnapshot.empty()

    def has_pending(self) -> bool:
        return not self.snapshot().is_empty

    def size(self) -> int:
        return self.snapshot().total

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def enqueue(self, kind: MutationKind | str, payload: Any) -> QueueEntry:
        """Validate *payload* and append it to the bucket of *kind*.

        Raises :class:`RakshaValidationError` if the payload does not match
        the kind's schema.  The queue never rejects on size; when a bucket
        bound is configured the oldest entries are evicted instead.
        """
        kind = MutationKind(kind)
        entry = new_queued_mutation(kind, payload)
        snapshot = self.snapshot()
        bucket = snapshot.bucket(kind)
        bucket.append(entry)

        limit = self._max_items_per_bucket
        if limit is not None and len(bucket) > limit:
            evicted = bucket[: len(bucket) - limit]
            del bucket[: len(bucket) - limit]
            _logger.warning(
                "Offline queue bucket %s over limit %d; evicted %d oldest entries: %s",
                kind.value,
                limit,
                len(evicted),
                [item.id for item in evicted],
            )

        self._save(snapshot)
        _logger.debug("Queued %s mutation %s (%d pending)", kind.value, entry.id, snapshot.total)
        return entry

    def clear(self) -> None:
        """Remove every queued entry."""
        try:
            self._storage.delete()
        except RakshaStorageError:
            _logger.warning("Failed to clear offline queue", exc_info=True)

    def remove(self, ids: Collection[str]) -> None:
        """Remove entries by id."""
        self.settle(succeeded=ids)

    def record_failures(self, failures: Mapping[str, str]) -> None:
        """Bump ``attempts`` and store ``last_error`` for each failed id."""
        self.settle(failed=failures)

    def settle(
        self,
        *,
        succeeded: Collection[str] = (),
        failed: Mapping[str, str] | None = None,
        expired: Collection[str] = (),
    ) -> MutationQueueSnapshot:
        """Apply the result of a replay to the stored snapshot.

        The snapshot is re-read so entries enqueued since the replay started
        are kept.  Succeeded and expired ids are removed; failed ids stay in
        place with their attempt count bumped.  When nothing is left the
        store is cleared.
        """
        failed = failed or {}
        dropped = set(succeeded) | set(expired)
        snapshot = self.snapshot()

        for kind in MutationKind:
            bucket = snapshot.bucket(kind)
            kept: list[Any] = []
            for item in bucket:
                if item.id in dropped:
                    continue
                error = failed.get(item.id)
                if error is not None:
                    item = item.model_copy(update={"attempts": item.attempts + 1, "last_error": error})
                kept.append(item)
            bucket[:] = kept

        if snapshot.is_empty:
            self.clear()
        else:
            self._save(snapshot)
        return snapshot

    def _save(self, snapshot: MutationQueueSnapshot) -> None:
        try:
            self._storage.save(snapshot)
        except RakshaStorageError:
            _logger.warning("Failed to persist offline queue", exc_info=True)
