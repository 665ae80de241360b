"""Asset cache controller.

Runs in its own task and talks to the foreground only through
:meth:`AssetCacheController.post_message` and the shared durable queue.
Serves the application shell cache-first and falls back to the cached
root document when a page navigation cannot reach the network.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, Protocol
from urllib.parse import urljoin, urlsplit

from pyraksha._constants import (
    CACHE_VERSION,
    PRECACHE_URLS,
    ROOT_DOCUMENT,
    SKIP_WAITING_MESSAGE,
    SYNC_OFFLINE_DATA_TAG,
)
from pyraksha.cache.fetch import Fetcher
from pyraksha.cache.notifications import Notification, build_notification, notification_click
from pyraksha.cache.storage import CacheStorage
from pyraksha.config import RakshaConfig
from pyraksha.exceptions import RakshaCacheError, RakshaTransportError
from pyraksha.models.assets import AssetRequest, CachedResponse

_logger = logging.getLogger(__name__)

SyncHandler = Callable[[], Awaitable[object]]

_STOP = object()


class WorkerState(enum.StrEnum):
    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class Notifier(Protocol):
    """Host hooks for showing notifications and opening pages."""

    async def show(self, notification: Notification) -> None:
        ...

    async def open_window(self, url: str) -> None:
        ...


class AssetCacheController:
    """Versioned cache-first controller for the application shell.

    Usage::

        controller = AssetCacheController.from_config(config, fetcher, origin="https://app.example")
        await controller.install()
        await controller.activate()
        response = await controller.fetch(AssetRequest.navigate("/reports"))
    """

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        origin: str,
        version: str = CACHE_VERSION,
        precache_urls: Iterable[str] = PRECACHE_URLS,
        caches: CacheStorage | None = None,
        sync_handler: SyncHandler | None = None,
        notifier: Notifier | None = None,
        skip_waiting_on_install: bool = True,
    ) -> None:
        parts = urlsplit(origin)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"origin must be an absolute URL, got {origin!r}")
        self._origin = f"{parts.scheme}://{parts.netloc}"
        self._fetcher = fetcher
        self._version = version
        self._precache_urls = tuple(precache_urls)
        self._caches = caches if caches is not None else CacheStorage()
        self._sync_handler = sync_handler
        self._notifier = notifier
        self._skip_waiting = skip_waiting_on_install
        self._state = WorkerState.PARSED
        self._claimed = False
        self._messages: asyncio.Queue[Any] = asyncio.Queue()

    @classmethod
    def from_config(cls, config: RakshaConfig, fetcher: Fetcher, **kwargs: Any) -> AssetCacheController:
        kwargs.setdefault("origin", config.base_url)
        kwargs.setdefault("version", config.cache_version)
        kwargs.setdefault("precache_urls", config.precache_urls)
        return cls(fetcher=fetcher, **kwargs)

    @property
    def version(self) -> str:
        return self._version

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def claimed(self) -> bool:
        """True once this version controls every open page."""
        return self._claimed

    @property
    def caches(self) -> CacheStorage:
        return self._caches

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def install(self, *, skip_precache: bool = False) -> None:
        """Pre-cache the shell manifest into the versioned cache.

        Every manifest URL must fetch with a successful status or the install
        fails with :class:`RakshaCacheError` and this version becomes
        redundant.  ``skip_precache`` completes the install without fetching.
        """
        if self._state is not WorkerState.PARSED:
            raise RakshaCacheError(f"cannot install from state {self._state.value}")
        self._state = WorkerState.INSTALLING
        if not skip_precache:
            try:
                await self._precache()
            except RakshaCacheError:
                self._state = WorkerState.REDUNDANT
                raise
        self._state = WorkerState.INSTALLED
        _logger.info("Cache %s installed (%d shell entries)", self._version, len(self._precache_urls))
        if self._skip_waiting:
            await self.activate()

    async def _precache(self) -> None:
        fetched: list[tuple[str, CachedResponse]] = []
        for url in self._precache_urls:
            absolute = self._resolve(url)
            try:
                response = await self._fetcher.fetch(AssetRequest(url=absolute))
            except RakshaTransportError as exc:
                raise RakshaCacheError(f"pre-cache of {url} failed: {exc}") from exc
            if not response.ok:
                raise RakshaCacheError(f"pre-cache of {url} returned HTTP {response.status}")
            fetched.append((absolute, response))
        try:
            cache = await self._caches.open(self._version)
            await cache.put_all(fetched)
        except Exception:
            _logger.warning("Storing pre-cached shell into %s failed", self._version, exc_info=True)

    async def activate(self) -> None:
        """Delete caches of other versions and claim every open page."""
        if self._state is WorkerState.ACTIVATED:
            return
        if self._state is not WorkerState.INSTALLED:
            raise RakshaCacheError(f"cannot activate from state {self._state.value}")
        self._state = WorkerState.ACTIVATING
        for name in await self._caches.keys():
            if name != self._version:
                _logger.info("Deleting old cache: %s", name)
                await self._caches.delete(name)
        self._state = WorkerState.ACTIVATED
        self._claimed = True

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def fetch(self, request: AssetRequest | str) -> CachedResponse:
        """Serve *request* cache-first.

        Misses go to the network; same-origin ``200`` replies are stored for
        next time.  When the network is unreachable a navigation gets the
        cached root document; anything else raises :class:`RakshaCacheError`.
        """
        if isinstance(request, str):
            request = AssetRequest(url=request)
        url = self._resolve(request.url)
        if url != request.url:
            request = request.model_copy(update={"url": url})

        cacheable = request.method.upper() == "GET"
        if cacheable:
            hit = await self._match(url)
            if hit is not None:
                return hit

        try:
            response = await self._fetcher.fetch(request)
        except RakshaTransportError as exc:
            if request.is_navigation:
                fallback = await self._match(self._resolve(ROOT_DOCUMENT))
                if fallback is not None:
                    _logger.debug("Offline navigation to %s served from cached root", url)
                    return fallback
            raise RakshaCacheError(f"{url} unavailable offline") from exc

        if cacheable and response.status == 200 and self._is_same_origin(response.url or url):
            try:
                cache = await self._caches.open(self._version)
                await cache.put(url, response)
            except Exception:
                _logger.warning("Caching %s failed", url, exc_info=True)
        return response

    async def _match(self, url: str) -> CachedResponse | None:
        # any cache may answer, so older versions still serve until activation
        try:
            return await self._caches.match(url)
        except Exception:
            _logger.warning("Cache lookup for %s failed", url, exc_info=True)
            return None

    def _resolve(self, url: str) -> str:
        return urljoin(self._origin + "/", url)

    def _is_same_origin(self, url: str) -> bool:
        parts = urlsplit(url)
        return f"{parts.scheme}://{parts.netloc}" == self._origin

    # ------------------------------------------------------------------
    # Message channel
    # ------------------------------------------------------------------

    def post_message(self, message: Mapping[str, Any]) -> None:
        """Queue a control message from the foreground."""
        self._messages.put_nowait(dict(message))

    async def run(self) -> None:
        """Process posted messages until :meth:`close` is called."""
        while True:
            message = await self._messages.get()
            try:
                if message is _STOP:
                    return
                await self.handle_message(message)
            except Exception:
                _logger.warning("Controller message %r failed", message, exc_info=True)
            finally:
                self._messages.task_done()

    def close(self) -> None:
        self._messages.put_nowait(_STOP)

    async def join(self) -> None:
        """Wait until every posted message has been handled."""
        await self._messages.join()

    async def handle_message(self, message: Mapping[str, Any]) -> None:
        if message.get("type") == SKIP_WAITING_MESSAGE:
            self._skip_waiting = True
            if self._state is WorkerState.INSTALLED:
                await self.activate()
            return
        _logger.debug("Ignoring controller message: %r", message)

    # ------------------------------------------------------------------
    # Background sync and push
    # ------------------------------------------------------------------

    async def handle_sync(self, tag: str) -> bool:
        """Handle a background-sync event; returns whether *tag* was recognized."""
        if tag != SYNC_OFFLINE_DATA_TAG:
            _logger.debug("Ignoring sync tag %s", tag)
            return False
        if self._sync_handler is None:
            return True
        try:
            await self._sync_handler()
        except Exception:
            _logger.warning("Background sync failed", exc_info=True)
        return True

    async def handle_push(self, payload: Mapping[str, Any] | None) -> Notification | None:
        if not payload:
            return None
        notification = build_notification(payload)
        if self._notifier is not None:
            await self._notifier.show(notification)
        return notification

    async def handle_notification_click(self, action: str | None) -> str | None:
        url = notification_click(action)
        if url is not None and self._notifier is not None:
            await self._notifier.open_window(url)
        return url
