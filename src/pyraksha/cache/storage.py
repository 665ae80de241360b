"""Named response caches, modelled on the browser Cache Storage API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from pyraksha.models.assets import CachedResponse

_logger = logging.getLogger(__name__)


class AssetCache:
    """One named cache mapping request URLs to stored responses."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._entries: dict[str, CachedResponse] = {}
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return self._name

    async def match(self, url: str) -> CachedResponse | None:
        return self._entries.get(url)

    async def put(self, url: str, response: CachedResponse) -> None:
        async with self._lock:
            self._entries[url] = response.as_cached()

    async def put_all(self, entries: Iterable[tuple[str, CachedResponse]]) -> None:
        """Store every entry or none of them."""
        staged = {url: response.as_cached() for url, response in entries}
        async with self._lock:
            self._entries.update(staged)

    async def delete(self, url: str) -> bool:
        async with self._lock:
            return self._entries.pop(url, None) is not None

    async def keys(self) -> list[str]:
        return list(self._entries)


class CacheStorage:
    """Registry of named :class:`AssetCache` instances.

    Shared between controller versions; activation of a new version
    deletes the caches of older ones.
    """

    def __init__(self) -> None:
        self._caches: dict[str, AssetCache] = {}

    async def open(self, name: str) -> AssetCache:
        """Return the cache called *name*, creating it if missing."""
        cache = self._caches.get(name)
        if cache is None:
            cache = AssetCache(name)
            self._caches[name] = cache
        return cache

    async def has(self, name: str) -> bool:
        return name in self._caches

    async def delete(self, name: str) -> bool:
        removed = self._caches.pop(name, None) is not None
        if removed:
            _logger.info("Deleted cache %s", name)
        return removed

    async def keys(self) -> list[str]:
        return list(self._caches)

    async def match(self, url: str) -> CachedResponse | None:
        """Search every cache, oldest first."""
        for cache in list(self._caches.values()):
            hit = await cache.match(url)
            if hit is not None:
                return hit
        return None
