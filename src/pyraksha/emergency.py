"""Press-and-hold emergency alert trigger."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pyraksha._constants import ACTIVATED_RESET_SECONDS, LONG_PRESS_SECONDS

_logger = logging.getLogger(__name__)

AlertSender = Callable[[], Awaitable[Any]]


class LongPressTrigger:
    """Send one emergency alert after the control is held long enough.

    ``press()`` arms a timer; ``release()`` or ``leave()`` before it fires
    disarms it and nothing is sent.  Once fired the send always runs to
    completion.  After a successful send the trigger stays ``activated``
    for ``reset_seconds`` and ignores presses, as it does while a send is
    in flight.
    """

    def __init__(
        self,
        send_alert: AlertSender,
        *,
        hold_seconds: float = LONG_PRESS_SECONDS,
        reset_seconds: float = ACTIVATED_RESET_SECONDS,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        self._send_alert = send_alert
        self._hold_seconds = hold_seconds
        self._reset_seconds = reset_seconds
        self._on_success = on_success
        self._on_error = on_error
        self._timer: asyncio.TimerHandle | None = None
        self._reset_timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._is_sending = False
        self._activated = False

    @property
    def is_pressed(self) -> bool:
        return self._timer is not None

    @property
    def is_sending(self) -> bool:
        return self._is_sending

    @property
    def activated(self) -> bool:
        return self._activated

    @property
    def disabled(self) -> bool:
        return self._is_sending or self._activated

    def press(self) -> bool:
        """Arm the hold timer.  Returns False when the press is ignored."""
        if self._timer is not None or self.disabled:
            return False
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._hold_seconds, self._fire)
        return True

    def release(self) -> None:
        self._disarm()

    def leave(self) -> None:
        self._disarm()

    def _disarm(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()

    def _fire(self) -> None:
        self._timer = None
        if self.disabled:
            return
        self._is_sending = True
        task = asyncio.get_running_loop().create_task(self._send())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send(self) -> None:
        try:
            result = await self._send_alert()
        except Exception as exc:
            _logger.warning("Emergency alert failed", exc_info=True)
            if self._on_error is not None:
                self._on_error(exc)
            return
        finally:
            self._is_sending = False
        _logger.info("Emergency alert sent")
        self._activated = True
        self._reset_timer = asyncio.get_running_loop().call_later(self._reset_seconds, self._reset)
        if self._on_success is not None:
            self._on_success(result)

    def _reset(self) -> None:
        self._reset_timer = None
        self._activated = False

    async def wait_idle(self) -> None:
        """Wait for an in-flight alert to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Disarm timers.  An alert already being sent is not cancelled."""
        self._disarm()
        if self._reset_timer is not None:
            self._reset_timer.cancel()
            self._reset_timer = None
