from __future__ import annotations

import asyncio

import pytest

from pyraksha.emergency import LongPressTrigger

HOLD = 0.05
RESET = 0.05


class AlertRecorder:
    def __init__(self, *, fail: bool = False, delay: float = 0.0) -> None:
        self.calls = 0
        self.fail = fail
        self.delay = delay

    async def __call__(self) -> dict:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("Failed to trigger emergency alert")
        return {"id": self.calls, "status": "active"}


@pytest.mark.asyncio
async def test_hold_long_enough_sends_exactly_one_alert() -> None:
    send = AlertRecorder()
    results: list[dict] = []
    trigger = LongPressTrigger(send, hold_seconds=HOLD, reset_seconds=RESET, on_success=results.append)

    assert trigger.press() is True
    assert trigger.press() is False
    await asyncio.sleep(HOLD * 3)
    trigger.release()
    await trigger.wait_idle()

    assert send.calls == 1
    assert results == [{"id": 1, "status": "active"}]
    assert trigger.activated is True


@pytest.mark.asyncio
@pytest.mark.parametrize("cancel", ["release", "leave"])
async def test_release_or_leave_before_hold_sends_nothing(cancel: str) -> None:
    send = AlertRecorder()
    trigger = LongPressTrigger(send, hold_seconds=HOLD, reset_seconds=RESET)

    trigger.press()
    await asyncio.sleep(HOLD / 5)
    getattr(trigger, cancel)()
    await asyncio.sleep(HOLD * 3)

    assert send.calls == 0
    assert trigger.is_pressed is False


@pytest.mark.asyncio
async def test_presses_ignored_while_sending_and_while_activated() -> None:
    send = AlertRecorder(delay=HOLD * 2)
    trigger = LongPressTrigger(send, hold_seconds=HOLD, reset_seconds=1.0)

    trigger.press()
    await asyncio.sleep(HOLD * 1.5)
    trigger.release()
    assert trigger.is_sending is True
    assert trigger.press() is False

    await trigger.wait_idle()
    assert trigger.activated is True
    assert trigger.press() is False
    assert send.calls == 1
    trigger.close()


@pytest.mark.asyncio
async def test_activated_resets_after_window() -> None:
    send = AlertRecorder()
    trigger = LongPressTrigger(send, hold_seconds=HOLD, reset_seconds=RESET)

    trigger.press()
    await asyncio.sleep(HOLD * 2)
    await trigger.wait_idle()
    assert trigger.activated is True

    await asyncio.sleep(RESET * 3)
    assert trigger.activated is False
    assert trigger.press() is True
    trigger.release()


@pytest.mark.asyncio
async def test_failed_alert_reports_error_and_rearms() -> None:
    send = AlertRecorder(fail=True)
    errors: list[BaseException] = []
    trigger = LongPressTrigger(send, hold_seconds=HOLD, reset_seconds=RESET, on_error=errors.append)

    trigger.press()
    await asyncio.sleep(HOLD * 2)
    await trigger.wait_idle()

    assert len(errors) == 1
    assert trigger.activated is False
    assert trigger.is_sending is False
    assert trigger.press() is True
    trigger.release()
