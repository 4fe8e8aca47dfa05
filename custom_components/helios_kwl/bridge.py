"""Bridge wiring the session, poller, translator and write-back together."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import logging
from typing import Any

from .api import HeliosClient
from .const import (
    COMPLETE_PAGES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_UPDATE_PAGES,
    MIN_POLL_INTERVAL,
    REFRESH_LOGIN_INTERVAL,
    REQUEST_DELAY,
    UNAUTHORIZED_RETRY_DELAY,
    WRITE_CONFIRM_DELAY,
)
from .poller import PagePoller, PollResult
from .session import SessionManager
from .state import StateStore
from .timers import IntervalCall, IntervalTracker, SleepCallable
from .translator import StateTranslator
from .writeback import WriteBackDispatcher

_LOGGER = logging.getLogger(__name__)


def clamp_poll_interval(interval: Any) -> int:
    """Return ``interval`` in seconds, raised to the minimum when too low."""

    try:
        seconds = int(interval)
    except (TypeError, ValueError):
        seconds = DEFAULT_POLL_INTERVAL
    if seconds < MIN_POLL_INTERVAL:
        _LOGGER.info("Set interval to minimum %s", MIN_POLL_INTERVAL)
        return MIN_POLL_INTERVAL
    return seconds


class HeliosBridge:
    """Start/stop handle for one ventilation unit.

    ``async_start`` logs in, reads every page once and starts the recurring
    poll and login refresh; ``async_stop`` tears everything down again.
    """

    def __init__(
        self,
        client: HeliosClient,
        store: StateStore,
        *,
        password: str,
        poll_interval: Any = DEFAULT_POLL_INTERVAL,
        update_pages: Iterable[int] = DEFAULT_UPDATE_PAGES,
        complete_pages: Iterable[int] = COMPLETE_PAGES,
        request_delay: float = REQUEST_DELAY,
        refresh_interval: float = REFRESH_LOGIN_INTERVAL,
        retry_delay: float = UNAUTHORIZED_RETRY_DELAY,
        confirm_delay: float = WRITE_CONFIRM_DELAY,
        sleep: SleepCallable | None = None,
        track_interval: IntervalTracker | None = None,
    ) -> None:
        """Build the components; nothing runs until ``async_start``."""
        self._client = client
        self._store = store
        self._password = password
        self._poll_interval = clamp_poll_interval(poll_interval)
        self._update_pages = tuple(update_pages) or DEFAULT_UPDATE_PAGES
        self._complete_pages = tuple(complete_pages)
        self._started = False

        self.session = SessionManager(
            client,
            store,
            refresh_interval=refresh_interval,
            retry_delay=retry_delay,
            track_interval=track_interval,
        )
        self.translator = StateTranslator(store)
        self.poller = PagePoller(
            client,
            self.session,
            self.translator,
            request_delay=request_delay,
            sleep=sleep,
        )
        self.writeback = WriteBackDispatcher(
            client,
            store,
            self.async_poll_complete,
            confirm_delay=confirm_delay,
        )
        self._update_poll = IntervalCall(
            "Update poll",
            self._poll_interval,
            self.async_poll_update,
            track=track_interval,
        )

    @property
    def store(self) -> StateStore:
        """Return the state store fed by this bridge."""

        return self._store

    @property
    def connected(self) -> bool:
        """Return the device connectivity flag."""

        return self.session.connected

    @property
    def poll_interval(self) -> int:
        """Return the effective recurring poll interval in seconds."""

        return self._poll_interval

    @property
    def update_pages(self) -> tuple[int, ...]:
        """Return the pages read by the recurring poll."""

        return self._update_pages

    @property
    def complete_pages(self) -> tuple[int, ...]:
        """Return every known page."""

        return self._complete_pages

    @property
    def started(self) -> bool:
        """Return True between start and stop."""

        return self._started

    @property
    def update_poll(self) -> IntervalCall:
        """Return the recurring update-page poll."""

        return self._update_poll

    async def async_poll_complete(self) -> PollResult:
        """Poll every known page."""

        return await self.poller.async_poll(self._complete_pages)

    async def async_poll_update(self) -> PollResult:
        """Poll the frequently changing pages."""

        return await self.poller.async_poll(self._update_pages)

    async def async_start(self) -> bool:
        """Log in, read everything once and start the timers.

        Returns False when the bridge stays idle for lack of configuration.
        """

        await self.session.async_publish_connection()
        if not self._client.host or not self._password:
            _LOGGER.warning("Please enter the device address and password")
            return False
        if self._started:
            return True
        self._started = True

        self.writeback.start()
        await self.session.async_login()
        await self.async_poll_complete()
        self._update_poll.start()
        self.session.start()
        _LOGGER.debug(
            "Bridge started: interval=%ss update_pages=%s",
            self._poll_interval,
            self._update_pages,
        )
        return True

    async def async_stop(self) -> None:
        """Cancel every timer and mark the device disconnected."""

        self._started = False
        for name, stop in (
            ("update poll", self._update_poll.async_stop),
            ("session", self.session.async_stop),
            ("write-back", self.writeback.async_stop),
        ):
            try:
                await stop()
            except asyncio.CancelledError:
                raise
            except Exception:  # noqa: BLE001 - shutdown must not raise
                _LOGGER.exception("Failed to stop %s", name)
        try:
            await self.session.async_set_connected(False)
        except Exception:  # noqa: BLE001 - shutdown must not raise
            _LOGGER.exception("Failed to publish disconnected state")

    def as_dict(self) -> dict[str, Any]:
        """Return a diagnostics snapshot."""

        return {
            "connected": self.connected,
            "started": self._started,
            "poll_interval": self._poll_interval,
            "update_pages": list(self._update_pages),
            "complete_pages": list(self._complete_pages),
            "ignored_pages": sorted(self.poller.ignored_pages),
            "created_identifiers": sorted(self.translator.created),
            "state_entries": len(self._store),
            "relogin_pending": self.session.relogin.pending,
            "confirm_poll_pending": self.writeback.confirm.pending,
        }


__all__ = ["HeliosBridge", "clamp_poll_interval"]
