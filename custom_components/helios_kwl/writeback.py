"""Relay consumer state changes to the device."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging

import aiohttp

from .api import HeliosClient, HeliosRequestError
from .const import WRITE_CONFIRM_DELAY
from .state import StateEntry, StateStore
from .timers import AsyncCallable, DebouncedCall

_LOGGER = logging.getLogger(__name__)


class WriteBackDispatcher:
    """Send unacknowledged state changes as device commands.

    Every change arms a confirmation poll; further changes inside the delay
    push it back instead of queueing more polls.
    """

    def __init__(
        self,
        client: HeliosClient,
        store: StateStore,
        confirm: AsyncCallable,
        *,
        confirm_delay: float = WRITE_CONFIRM_DELAY,
    ) -> None:
        """Initialise the dispatcher; ``confirm`` re-reads the device."""
        self._client = client
        self._store = store
        self._confirm = DebouncedCall("Write confirmation poll", confirm_delay, confirm)
        self._unsub: Callable[[], None] | None = None

    @property
    def confirm(self) -> DebouncedCall:
        """Return the debounced confirmation poll."""

        return self._confirm

    def start(self) -> None:
        """Subscribe to consumer changes in the store."""

        if self._unsub is None:
            self._unsub = self._store.async_subscribe_changes(self.async_handle_change)

    async def async_stop(self) -> None:
        """Unsubscribe and drop any pending confirmation poll."""

        if self._unsub is not None:
            self._unsub()
            self._unsub = None
        await self._confirm.async_shutdown()

    async def async_handle_change(self, entry: StateEntry) -> None:
        """Send ``entry``'s new value to the device."""

        if entry.ack:
            return
        meta = entry.meta
        if not meta.variable:
            _LOGGER.warning("State %s has no device variable; ignoring change", entry.path)
            return
        if not meta.writable:
            _LOGGER.warning("State %s is read-only; ignoring change", entry.path)
            return

        _LOGGER.debug("Sending %s=%s", meta.variable, entry.value)
        try:
            body = await self._client.send_command(meta.variable, entry.value)
        except asyncio.CancelledError:
            raise
        except HeliosRequestError as err:
            _LOGGER.error("Setting %s failed: %s", meta.variable, err)
            if err.body:
                _LOGGER.error("Command response: %s", err.body)
        except (aiohttp.ClientError, TimeoutError) as err:
            _LOGGER.error("Setting %s failed: %s", meta.variable, err)
        else:
            _LOGGER.debug("Command response: %s", body)

        self._confirm.schedule()


__all__ = ["WriteBackDispatcher"]
