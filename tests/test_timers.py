from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from conftest import FakeIntervalTracker
from custom_components.helios_kwl.timers import DebouncedCall, IntervalCall


@pytest.mark.asyncio
async def test_debounced_call_replaces_pending_handle() -> None:
    target = AsyncMock()
    call = DebouncedCall("test", 0.05, target)

    call.schedule()
    first = call.handle
    call.schedule()
    second = call.handle

    assert first is not None and first.cancelled()
    assert second is not None and not second.cancelled()
    assert call.pending

    await asyncio.sleep(0.15)

    target.assert_awaited_once()
    assert not call.pending


@pytest.mark.asyncio
async def test_debounced_call_delay_matches_schedule() -> None:
    call = DebouncedCall("test", 30, AsyncMock())
    loop = asyncio.get_running_loop()

    call.schedule()

    assert call.handle is not None
    assert call.handle.when() - loop.time() == pytest.approx(30, abs=1)
    await call.async_shutdown()
    assert not call.pending


@pytest.mark.asyncio
async def test_debounced_call_survives_target_errors() -> None:
    target = AsyncMock(side_effect=RuntimeError("boom"))
    call = DebouncedCall("test", 0, target)

    call.schedule()
    await asyncio.sleep(0.05)

    target.assert_awaited_once()
    call.schedule()
    await asyncio.sleep(0.05)
    assert target.await_count == 2


@pytest.mark.asyncio
async def test_debounced_shutdown_without_schedule() -> None:
    call = DebouncedCall("test", 1, AsyncMock())

    await call.async_shutdown()
    call.cancel()

    assert not call.pending


@pytest.mark.asyncio
async def test_interval_call_registers_once(tracker: FakeIntervalTracker) -> None:
    call = IntervalCall("test", 300, AsyncMock(), track=tracker)

    call.start()
    call.start()

    assert tracker.intervals == [300]
    assert call.running
    await call.async_stop()
    await call.async_stop()
    assert tracker.listeners == []
    assert not call.running


@pytest.mark.asyncio
async def test_interval_call_runs_target_and_survives_errors(
    tracker: FakeIntervalTracker,
) -> None:
    target = AsyncMock(side_effect=[RuntimeError("boom"), None])
    call = IntervalCall("test", 30, target, track=tracker)
    call.start()

    tracker.fire()
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    tracker.fire()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert target.await_count == 2
    assert not call.active
    await call.async_stop()


@pytest.mark.asyncio
async def test_interval_call_skips_trigger_while_active(
    tracker: FakeIntervalTracker,
) -> None:
    release = asyncio.Event()
    runs = 0

    async def _target() -> None:
        nonlocal runs
        runs += 1
        await release.wait()

    call = IntervalCall("test", 30, _target, track=tracker)
    call.start()

    tracker.fire()
    await asyncio.sleep(0)
    tracker.fire()
    await asyncio.sleep(0)

    assert runs == 1
    assert call.active

    await call.async_stop()
    assert not call.active
    assert runs == 1


@pytest.mark.asyncio
async def test_interval_call_without_tracker_stays_idle() -> None:
    target = AsyncMock()
    call = IntervalCall("test", 30, target)

    call.start()

    assert not call.running
    await call.async_stop()
    target.assert_not_awaited()
