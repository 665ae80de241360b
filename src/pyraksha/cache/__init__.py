"""Asset cache controller for the application shell."""

from pyraksha.cache.controller import AssetCacheController, Notifier, WorkerState
from pyraksha.cache.fetch import AiohttpFetcher, Fetcher
from pyraksha.cache.notifications import Notification, NotificationAction, build_notification, notification_click
from pyraksha.cache.storage import AssetCache, CacheStorage

__all__ = [
    "AiohttpFetcher",
    "AssetCache",
    "AssetCacheController",
    "CacheStorage",
    "Fetcher",
    "Notification",
    "NotificationAction",
    "Notifier",
    "WorkerState",
    "build_notification",
    "notification_click",
]
