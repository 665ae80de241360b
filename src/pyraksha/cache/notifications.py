"""Push notification display contract.

A push payload ``{title, body, primaryKey}`` becomes a :class:`Notification`
with two actions.  ``explore`` and the default click open the root
document; ``close`` only dismisses.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pyraksha._constants import NOTIFICATION_ICON, NOTIFICATION_VIBRATE, ROOT_DOCUMENT

EXPLORE_ACTION = "explore"
CLOSE_ACTION = "close"


@dataclass(frozen=True, slots=True)
class NotificationAction:
    action: str
    title: str
    icon: str = NOTIFICATION_ICON


DEFAULT_ACTIONS: tuple[NotificationAction, ...] = (
    NotificationAction(EXPLORE_ACTION, "View Details"),
    NotificationAction(CLOSE_ACTION, "Close"),
)


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    body: str = ""
    icon: str = NOTIFICATION_ICON
    badge: str = NOTIFICATION_ICON
    vibrate: tuple[int, ...] = NOTIFICATION_VIBRATE
    data: dict[str, Any] = field(default_factory=dict)
    actions: tuple[NotificationAction, ...] = DEFAULT_ACTIONS


def build_notification(payload: Mapping[str, Any], *, now_ms: int | None = None) -> Notification:
    """Build the notification shown for a push *payload*."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    title = payload.get("title")
    body = payload.get("body")
    return Notification(
        title=str(title) if title is not None else "",
        body=str(body) if body is not None else "",
        data={"dateOfArrival": now_ms, "primaryKey": payload.get("primaryKey")},
    )


def notification_click(action: str | None) -> str | None:
    """Return the URL to open for a click on *action*, or ``None`` to just dismiss."""
    if action == CLOSE_ACTION:
        return None
    return ROOT_DOCUMENT
