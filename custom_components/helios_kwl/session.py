"""Session handling for the device web interface."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from .api import HeliosClient, HeliosRequestError
from .const import (
    CONNECTION_PATH,
    REFRESH_LOGIN_INTERVAL,
    UNAUTHORIZED_RETRY_DELAY,
)
from .parser import ValueType
from .state import StateMeta, StateStore
from .timers import DebouncedCall, IntervalCall, IntervalTracker

_LOGGER = logging.getLogger(__name__)

CONNECTION_META = StateMeta(
    name="Device connected",
    variable="",
    value_type=ValueType.BOOLEAN,
    writable=False,
)


class SessionManager:
    """Own the login state and the connectivity flag."""

    def __init__(
        self,
        client: HeliosClient,
        store: StateStore,
        *,
        refresh_interval: float = REFRESH_LOGIN_INTERVAL,
        retry_delay: float = UNAUTHORIZED_RETRY_DELAY,
        track_interval: IntervalTracker | None = None,
    ) -> None:
        """Initialise the manager and its timers (not started)."""
        self._client = client
        self._store = store
        self._connected = False
        self._refresh = IntervalCall(
            "Login refresh",
            refresh_interval,
            self.async_login,
            track=track_interval,
        )
        self._relogin = DebouncedCall(
            "Unauthorized re-login", retry_delay, self.async_login
        )

    @property
    def connected(self) -> bool:
        """Return the last known connectivity."""

        return self._connected

    @property
    def relogin(self) -> DebouncedCall:
        """Return the debounced re-login timer."""

        return self._relogin

    @property
    def refresh(self) -> IntervalCall:
        """Return the periodic login refresh."""

        return self._refresh

    async def async_publish_connection(self) -> None:
        """Create the connectivity entry and publish the current flag."""

        await self._store.async_ensure_entry(CONNECTION_PATH, CONNECTION_META)
        await self._store.async_set(CONNECTION_PATH, self._connected, ack=True)

    async def async_set_connected(self, connected: bool) -> None:
        """Update the connectivity flag and its state entry."""

        self._connected = connected
        if CONNECTION_PATH not in self._store:
            return
        await self._store.async_set(CONNECTION_PATH, connected, ack=True)

    async def async_login(self) -> bool:
        """Authenticate once; failures are logged and reported as False."""

        try:
            body = await self._client.login()
        except asyncio.CancelledError:
            raise
        except HeliosRequestError as err:
            await self.async_set_connected(False)
            _LOGGER.error("Login to %s failed: %s", self._client.host, err)
            if err.body:
                _LOGGER.error("Login response: %s", err.body)
            return False
        except (aiohttp.ClientError, TimeoutError) as err:
            await self.async_set_connected(False)
            _LOGGER.error("Login to %s failed: %s", self._client.host, err)
            return False

        _LOGGER.debug("Login response: %s", body)
        await self.async_set_connected(True)
        return True

    def schedule_relogin(self) -> None:
        """Log in again after the retry delay, coalescing repeated calls."""

        _LOGGER.info(
            "Received 401 from %s; logging in again in %s seconds",
            self._client.host,
            self._relogin.delay,
        )
        self._relogin.schedule()

    def start(self) -> None:
        """Start the proactive login refresh."""

        self._refresh.start()

    async def async_stop(self) -> None:
        """Cancel the login refresh and any pending re-login."""

        await self._refresh.async_stop()
        await self._relogin.async_shutdown()


__all__ = ["CONNECTION_META", "SessionManager"]
