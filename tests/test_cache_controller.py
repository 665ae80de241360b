from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from pyraksha.cache import AssetCacheController, CacheStorage, WorkerState
from pyraksha.cache.notifications import Notification
from pyraksha.exceptions import RakshaCacheError, RakshaTransportError
from pyraksha.models import AssetRequest, CachedResponse

ORIGIN = "https://raksha.example.org"
SHELL = ("/", "/reports", "/static/js/bundle.js")


@dataclass
class FakeFetcher:
    """Serves ``/...`` paths from a dict; ``offline`` makes every fetch fail."""

    responses: dict[str, tuple[int, bytes]] = field(default_factory=dict)
    offline: bool = False
    calls: list[str] = field(default_factory=list)

    async def fetch(self, request: AssetRequest) -> CachedResponse:
        self.calls.append(request.url)
        if self.offline:
            raise RakshaTransportError("network unreachable", endpoint=request.url)
        status, body = self.responses.get(request.url, (404, b"not found"))
        return CachedResponse(url=request.url, status=status, body=body)


def _fetcher() -> FakeFetcher:
    return FakeFetcher(
        responses={
            f"{ORIGIN}/": (200, b"<html>shell</html>"),
            f"{ORIGIN}/reports": (200, b"<html>reports</html>"),
            f"{ORIGIN}/static/js/bundle.js": (200, b"console.log(1)"),
            f"{ORIGIN}/api/incidents": (200, b"[]"),
            f"{ORIGIN}/missing": (404, b"nope"),
            "https://cdn.example.net/font.woff": (200, b"font"),
        }
    )


def _controller(fetcher: FakeFetcher, **kwargs: object) -> AssetCacheController:
    return AssetCacheController(fetcher=fetcher, origin=ORIGIN, precache_urls=SHELL, **kwargs)


@pytest.mark.asyncio
async def test_install_precaches_and_activates() -> None:
    fetcher = _fetcher()
    controller = _controller(fetcher)

    await controller.install()

    assert controller.state is WorkerState.ACTIVATED
    assert controller.claimed is True
    cache = await controller.caches.open(controller.version)
    assert sorted(await cache.keys()) == sorted(f"{ORIGIN}{url}" for url in SHELL)


@pytest.mark.asyncio
async def test_manifest_url_is_served_from_cache_without_network() -> None:
    fetcher = _fetcher()
    controller = _controller(fetcher)
    await controller.install()
    fetcher.calls.clear()

    response = await controller.fetch("/reports")

    assert response.body == b"<html>reports</html>"
    assert response.from_cache is True
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_same_origin_200_is_cached_for_next_request() -> None:
    fetcher = _fetcher()
    controller = _controller(fetcher)
    await controller.install()
    fetcher.calls.clear()

    first = await controller.fetch("/api/incidents")
    second = await controller.fetch("/api/incidents")

    assert first.from_cache is False
    assert second.from_cache is True
    assert fetcher.calls == [f"{ORIGIN}/api/incidents"]


@pytest.mark.asyncio
async def test_error_status_and_cross_origin_are_not_cached() -> None:
    fetcher = _fetcher()
    controller = _controller(fetcher)
    await controller.install()
    fetcher.calls.clear()

    assert (await controller.fetch("/missing")).status == 404
    assert (await controller.fetch("/missing")).status == 404
    await controller.fetch("https://cdn.example.net/font.woff")
    await controller.fetch("https://cdn.example.net/font.woff")

    assert len(fetcher.calls) == 4


@pytest.mark.asyncio
async def test_offline_navigation_falls_back_to_root_document() -> None:
    fetcher = _fetcher()
    controller = _controller(fetcher)
    await controller.install()
    fetcher.offline = True

    response = await controller.fetch(AssetRequest.navigate("/tracking"))

    assert response.body == b"<html>shell</html>"


@pytest.mark.asyncio
async def test_offline_non_navigation_propagates() -> None:
    fetcher = _fetcher()
    controller = _controller(fetcher)
    await controller.install()
    fetcher.offline = True

    with pytest.raises(RakshaCacheError):
        await controller.fetch("/static/css/other.css")


@pytest.mark.asyncio
async def test_install_fails_when_manifest_entry_missing() -> None:
    fetcher = _fetcher()
    controller = AssetCacheController(fetcher=fetcher, origin=ORIGIN, precache_urls=("/", "/missing"))

    with pytest.raises(RakshaCacheError):
        await controller.install()

    assert controller.state is WorkerState.REDUNDANT
    assert await controller.caches.keys() == []


@pytest.mark.asyncio
async def test_install_can_skip_precache() -> None:
    fetcher = _fetcher()
    fetcher.offline = True
    controller = _controller(fetcher)

    await controller.install(skip_precache=True)

    assert controller.state is WorkerState.ACTIVATED


@pytest.mark.asyncio
async def test_storage_errors_do_not_break_fetch() -> None:
    class BrokenStorage(CacheStorage):
        async def open(self, name: str):  # type: ignore[override]
            raise OSError("disk full")

    fetcher = _fetcher()
    controller = _controller(fetcher, caches=BrokenStorage())
    await controller.install()

    response = await controller.fetch("/api/incidents")

    assert response.status == 200
    assert response.body == b"[]"


@pytest.mark.asyncio
async def test_activation_removes_other_versions() -> None:
    caches = CacheStorage()
    await caches.open("raksha-sahayak-v0")
    await caches.open("unrelated")
    fetcher = _fetcher()

    old = _controller(fetcher, caches=caches, version="raksha-sahayak-v1")
    await old.install()
    new = _controller(fetcher, caches=caches, version="raksha-sahayak-v2")
    await new.install()

    assert await caches.keys() == ["raksha-sahayak-v2"]


@pytest.mark.asyncio
async def test_waiting_version_serves_entries_of_previous_version() -> None:
    caches = CacheStorage()
    legacy = await caches.open("raksha-sahayak-v1")
    await legacy.put(f"{ORIGIN}/offline.html", CachedResponse(url=f"{ORIGIN}/offline.html", status=200, body=b"old"))
    fetcher = _fetcher()
    fetcher.offline = True

    controller = _controller(fetcher, caches=caches, version="raksha-sahayak-v2", skip_waiting_on_install=False)
    await controller.install(skip_precache=True)
    response = await controller.fetch("/offline.html")

    assert response.body == b"old"
    assert response.from_cache is True
    assert await caches.match(f"{ORIGIN}/nowhere") is None

    await controller.activate()
    with pytest.raises(RakshaCacheError):
        await controller.fetch("/offline.html")


@pytest.mark.asyncio
async def test_skip_waiting_message_activates_waiting_version() -> None:
    fetcher = _fetcher()
    controller = _controller(fetcher, skip_waiting_on_install=False)
    await controller.install()
    assert controller.state is WorkerState.INSTALLED

    runner = asyncio.create_task(controller.run())
    controller.post_message({"type": "PING"})
    controller.post_message({"type": "SKIP_WAITING"})
    await controller.join()
    controller.close()
    await runner

    assert controller.state is WorkerState.ACTIVATED
    assert controller.claimed is True


@pytest.mark.asyncio
async def test_sync_tag_runs_drain() -> None:
    calls: list[str] = []

    async def drain() -> None:
        calls.append("drain")

    controller = _controller(_fetcher(), sync_handler=drain)

    assert await controller.handle_sync("sync-offline-data") is True
    assert await controller.handle_sync("something-else") is False
    assert calls == ["drain"]


@pytest.mark.asyncio
async def test_push_and_click_use_notifier() -> None:
    class RecordingNotifier:
        def __init__(self) -> None:
            self.shown: list[Notification] = []
            self.opened: list[str] = []

        async def show(self, notification: Notification) -> None:
            self.shown.append(notification)

        async def open_window(self, url: str) -> None:
            self.opened.append(url)

    notifier = RecordingNotifier()
    controller = _controller(_fetcher(), notifier=notifier)

    await controller.handle_push({"title": "Alert", "body": "Check in", "primaryKey": 4})
    assert await controller.handle_notification_click("close") is None
    assert await controller.handle_notification_click("explore") == "/"

    assert [n.title for n in notifier.shown] == ["Alert"]
    assert notifier.opened == ["/"]
    assert await controller.handle_push(None) is None


def test_origin_must_be_absolute() -> None:
    with pytest.raises(ValueError):
        AssetCacheController(fetcher=_fetcher(), origin="/relative")
