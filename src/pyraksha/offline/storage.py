"""Durable key/value stores backing the offline mutation queue.

The queue only needs a narrow keyed-string store (``get``/``set``/``delete``),
the same shape as a browser's ``localStorage``.  :class:`SnapshotStore`
binds one key of such a store to :class:`MutationQueueSnapshot` values.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from pyraksha._constants import STORAGE_NAMESPACE
from pyraksha.exceptions import RakshaStorageError
from pyraksha.models.snapshot import MutationQueueSnapshot

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal durable string store.

    Implementations raise :class:`RakshaStorageError` when the underlying
    medium cannot be read or written.
    """

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self, namespace: str = STORAGE_NAMESPACE) -> None:
        self._namespace = namespace
        self._data: dict[str, str] = {}

    def _make_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> str | None:
        return self._data.get(self._make_key(key))

    def set(self, key: str, value: str) -> None:
        self._data[self._make_key(key)] = value

    def delete(self, key: str) -> None:
        self._data.pop(self._make_key(key), None)


class JsonFileStore:
    """Keyed store persisted as one JSON object on disk.

    Every write replaces the file through a temporary sibling and
    ``os.replace`` so a crash never leaves a half-written file behind.
    Concurrent writers are not coordinated (last write wins).
    """

    def __init__(self, path: str | os.PathLike[str], *, namespace: str = STORAGE_NAMESPACE) -> None:
        self._path = Path(path).expanduser()
        self._namespace = namespace

    @property
    def path(self) -> Path:
        return self._path

    def _make_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def _read_all(self) -> dict[str, Any]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise RakshaStorageError(f"cannot read {self._path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            text = raw.decode("utf-8")
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RakshaStorageError(f"{self._path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise RakshaStorageError(f"{self._path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise RakshaStorageError(f"cannot write {self._path}: {exc}") from exc

    def _read_for_update(self) -> dict[str, Any]:
        try:
            return self._read_all()
        except RakshaStorageError:
            _logger.warning("Discarding unreadable store file %s", self._path, exc_info=True)
            return {}

    def get(self, key: str) -> str | None:
        value = self._read_all().get(self._make_key(key))
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_for_update()
        data[self._make_key(key)] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_for_update()
        if data.pop(self._make_key(key), None) is None:
            return
        self._write_all(data)


class SnapshotStore:
    """Load/save a :class:`MutationQueueSnapshot` under one key."""

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> MutationQueueSnapshot:
        """Return the persisted snapshot.

        Raises :class:`RakshaStorageError` when the data is unreadable or
        does not parse into a snapshot.
        """
        raw = self._store.get(self._key)
        if raw is None:
            return MutationQueueSnapshot.empty()
        try:
            return MutationQueueSnapshot.model_validate_json(raw)
        except ValidationError as exc:
            raise RakshaStorageError(f"stored queue under {self._key!r} is corrupt: {exc}") from exc

    def save(self, snapshot: MutationQueueSnapshot) -> None:
        self._store.set(self._key, json.dumps(snapshot.to_storage(), ensure_ascii=False))

    def delete(self) -> None:
        self._store.delete(self._key)
