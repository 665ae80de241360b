"""Connectivity tracking and the single replay trigger.

The monitor does not poll.  The host delivers platform ``online`` /
``offline`` signals with :meth:`ConnectivityMonitor.handle_signal` (or
:meth:`~ConnectivityMonitor.handle_signal_threadsafe` from another thread).
Exactly one replay callback is owned by the monitor and scheduled once per
offline-to-online transition.  Observers only see transitions.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

from pyraksha.models._base import utcnow

_logger = logging.getLogger(__name__)

Reachability = Callable[[], bool]
ReplayTrigger = Callable[[], Awaitable[object]]


class ConnectivityTransition(enum.StrEnum):
    BECAME_ONLINE = "became_online"
    BECAME_OFFLINE = "became_offline"


ConnectivityObserver = Callable[[ConnectivityTransition], None]


@dataclass(frozen=True, slots=True)
class ConnectivityState:
    """Current reachability.  Ephemeral; never persisted."""

    is_online: bool
    since: datetime | None = None


class ConnectivityMonitor:
    """Track online/offline state from platform signals.

    Usage::

        monitor = ConnectivityMonitor(is_reachable, on_online=engine.drain)
        monitor.start()
        ...
        monitor.handle_online()
    """

    def __init__(self, reachability: Reachability, *, on_online: ReplayTrigger | None = None) -> None:
        self._reachability = reachability
        self._on_online = on_online
        self._is_online = False
        self._since: datetime | None = None
        self._started = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._observers: list[ConnectivityObserver] = []
        self._tasks: set[asyncio.Task[object]] = set()

    @property
    def is_online(self) -> bool:
        return self._is_online

    @property
    def state(self) -> ConnectivityState:
        return ConnectivityState(is_online=self._is_online, since=self._since)

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Begin accepting signals; the initial state is read now."""
        if self._started:
            return
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        self._is_online = bool(self._reachability())
        self._since = utcnow()
        self._started = True
        _logger.debug("Connectivity monitor started (online=%s)", self._is_online)

    def stop(self) -> None:
        """Stop accepting signals.  A replay already scheduled runs to completion."""
        self._started = False
        self._observers.clear()

    def subscribe(self, observer: ConnectivityObserver) -> Callable[[], None]:
        """Register a read-only observer; returns a callable that unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Platform signals
    # ------------------------------------------------------------------

    def handle_online(self) -> None:
        self.handle_signal(True)

    def handle_offline(self) -> None:
        self.handle_signal(False)

    def handle_signal(self, online: bool) -> None:
        """Apply a platform signal.  Must be called on the event loop thread."""
        if not self._started:
            _logger.debug("Ignoring connectivity signal before start()")
            return
        online = bool(online)
        if online == self._is_online:
            return
        self._is_online = online
        self._since = utcnow()
        transition = ConnectivityTransition.BECAME_ONLINE if online else ConnectivityTransition.BECAME_OFFLINE
        _logger.info("Connectivity changed: %s", transition.value)
        if online:
            self._schedule_replay()
        self._notify(transition)

    def handle_signal_threadsafe(self, online: bool) -> None:
        """Deliver a platform signal from a non-loop thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            _logger.debug("Dropping connectivity signal; no event loop attached")
            return
        loop.call_soon_threadsafe(self.handle_signal, online)

    async def wait_idle(self) -> None:
        """Wait for every scheduled replay to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _schedule_replay(self) -> None:
        if self._on_online is None:
            return
        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(self._run_replay())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_replay(self) -> None:
        assert self._on_online is not None  # noqa: S101
        try:
            await self._on_online()
        except Exception:
            _logger.warning("Replay after reconnect failed", exc_info=True)

    def _notify(self, transition: ConnectivityTransition) -> None:
        for observer in list(self._observers):
            try:
                observer(transition)
            except Exception:
                _logger.warning("Connectivity observer raised", exc_info=True)
