"""Debounced and interval timers owned by the bridge."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import suppress
from datetime import datetime, timedelta
import logging
from typing import Any

from homeassistant.core import callback

_LOGGER = logging.getLogger(__name__)

AsyncCallable = Callable[[], Awaitable[Any]]
SleepCallable = Callable[[float], Awaitable[Any]]
IntervalTracker = Callable[
    [Callable[[datetime], Any], timedelta], Callable[[], None]
]


async def _async_run_logged(name: str, target: AsyncCallable) -> None:
    try:
        await target()
    except asyncio.CancelledError:
        raise
    except Exception:  # noqa: BLE001 - timers must keep the loop alive
        _LOGGER.exception("%s: scheduled call failed", name)


class DebouncedCall:
    """One-shot delayed call with at most one pending instance.

    Scheduling again cancels the pending call and starts the delay over.
    """

    def __init__(self, name: str, delay: float, target: AsyncCallable) -> None:
        """Store the delay and the coroutine function to run."""
        self._name = name
        self._delay = delay
        self._target = target
        self._handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def delay(self) -> float:
        """Return the delay in seconds."""

        return self._delay

    @property
    def pending(self) -> bool:
        """Return True while a call is scheduled but not yet started."""

        return self._handle is not None

    @property
    def handle(self) -> asyncio.TimerHandle | None:
        """Return the pending timer handle, if any."""

        return self._handle

    def schedule(self) -> None:
        """Arm the timer, replacing any pending call."""

        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
            _LOGGER.debug("%s: replacing pending call", self._name)
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        """Cancel the pending call without touching a running one."""

        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.get_running_loop().create_task(
            _async_run_logged(self._name, self._target)
        )
        self._task = task

        def _finalise(finished: asyncio.Task[None]) -> None:
            if self._task is finished:
                self._task = None

        task.add_done_callback(_finalise)

    async def async_shutdown(self) -> None:
        """Cancel the pending call and any call still running."""

        self.cancel()
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task


class IntervalCall:
    """Run a coroutine function on a Home Assistant time interval.

    ``track`` is ``async_track_time_interval`` bound to ``hass``. A trigger
    that arrives while the previous run is still active is skipped.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        target: AsyncCallable,
        *,
        track: IntervalTracker | None = None,
    ) -> None:
        """Store the interval, target and time tracker."""
        self._name = name
        self._interval = interval
        self._target = target
        self._track = track
        self._remove_listener: Callable[[], None] | None = None
        self._active_task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        """Return the period in seconds."""

        return self._interval

    @property
    def running(self) -> bool:
        """Return True while the interval listener is registered."""

        return self._remove_listener is not None

    @property
    def active(self) -> bool:
        """Return True while a triggered run has not finished."""

        return self._active_task is not None and not self._active_task.done()

    def start(self) -> None:
        """Register the interval listener unless it already exists."""

        if self._remove_listener is not None:
            return
        if self._track is None:
            _LOGGER.debug("%s: time tracker unavailable; scheduling skipped", self._name)
            return
        self._remove_listener = self._track(
            self._on_interval, timedelta(seconds=self._interval)
        )

    @callback
    def _on_interval(self, _now: datetime) -> None:
        if self.active:
            _LOGGER.debug("%s: skipping trigger while previous run is active", self._name)
            return
        task = asyncio.get_running_loop().create_task(
            _async_run_logged(self._name, self._target)
        )
        self._active_task = task

        def _finalise(finished: asyncio.Task[None]) -> None:
            if self._active_task is finished:
                self._active_task = None

        task.add_done_callback(_finalise)

    async def async_stop(self) -> None:
        """Remove the interval listener and cancel an active run."""

        remove = self._remove_listener
        self._remove_listener = None
        if remove is not None:
            try:
                remove()
            except Exception:  # noqa: BLE001
                _LOGGER.debug("%s: failed to remove time listener", self._name, exc_info=True)

        task = self._active_task
        self._active_task = None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task


__all__ = [
    "AsyncCallable",
    "DebouncedCall",
    "IntervalCall",
    "IntervalTracker",
    "SleepCallable",
]
