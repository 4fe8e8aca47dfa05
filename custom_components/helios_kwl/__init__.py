"""Home Assistant entry point for the Helios KWL integration."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from functools import partial
import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EVENT_HOMEASSISTANT_STOP
from homeassistant.core import HomeAssistant
from homeassistant.helpers import aiohttp_client
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.event import async_track_time_interval

from .api import HeliosClient
from .bridge import HeliosBridge
from .const import (
    CONF_HOST,
    CONF_PASSWORD,
    CONF_POLL_INTERVAL,
    CONF_UPDATE_PAGES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_UPDATE_PAGES,
    DOMAIN,
    parse_page_list,
    signal_entry_created,
    signal_state_updated,
)
from .runtime import EntryRuntime
from .state import StateEntry, StateStore

_LOGGER = logging.getLogger(__name__)

PLATFORMS = ["binary_sensor", "number", "sensor", "text"]


def create_client(
    hass: HomeAssistant, host: str, password: str, *, dedicated: bool = False
) -> HeliosClient:
    """Return a device client.

    A dedicated session keeps its own keep-alive connection to the device;
    the shared session is enough for one-off validation.
    """

    if dedicated:
        session = aiohttp_client.async_create_clientsession(hass)
    else:
        session = aiohttp_client.async_get_clientsession(hass)
    return HeliosClient(session, host, password)


def _entry_update_pages(entry: ConfigEntry) -> tuple[int, ...]:
    """Return the recurring poll pages configured for ``entry``."""

    raw = entry.options.get(CONF_UPDATE_PAGES, entry.data.get(CONF_UPDATE_PAGES))
    try:
        return parse_page_list(raw)
    except ValueError:
        _LOGGER.warning(
            "Invalid update page list %r; using %s", raw, DEFAULT_UPDATE_PAGES
        )
        return DEFAULT_UPDATE_PAGES


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the Helios KWL integration for a config entry."""
    host = entry.data.get(CONF_HOST, "")
    password = entry.data.get(CONF_PASSWORD, "")
    interval = entry.options.get(
        CONF_POLL_INTERVAL, entry.data.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)
    )

    client = create_client(hass, host, password, dedicated=True)
    store = StateStore()
    bridge = HeliosBridge(
        client,
        store,
        password=password,
        poll_interval=interval,
        update_pages=_entry_update_pages(entry),
        track_interval=partial(
            async_track_time_interval, hass, cancel_on_shutdown=True
        ),
    )
    runtime = EntryRuntime(
        config_entry=entry,
        client=client,
        store=store,
        bridge=bridge,
    )
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = runtime

    def _forward_created(state: StateEntry) -> None:
        async_dispatcher_send(hass, signal_entry_created(entry.entry_id), state)

    def _forward_updated(state: StateEntry) -> None:
        async_dispatcher_send(
            hass, signal_state_updated(entry.entry_id, state.path), state
        )

    runtime.unsubs.append(store.async_subscribe_created(_forward_created))
    runtime.unsubs.append(store.async_subscribe_updates(_forward_updated))

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    async def _async_handle_hass_stop(_event: Any) -> None:
        """Stop background activity gracefully when Home Assistant stops."""

        await _async_shutdown_entry(runtime)

    entry.async_on_unload(
        hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, _async_handle_hass_stop)
    )
    entry.async_on_unload(entry.add_update_listener(async_update_entry_options))

    runtime.start_task = hass.async_create_background_task(
        bridge.async_start(), f"{DOMAIN}_{entry.entry_id}_start"
    )
    _LOGGER.debug("Helios KWL entry %s set up for %s", entry.entry_id, client.host)
    return True


async def _async_shutdown_entry(runtime: EntryRuntime) -> None:
    """Stop the bridge and drop store listeners for a runtime record."""

    if runtime._shutdown_complete:
        return
    runtime._shutdown_complete = True

    task = runtime.start_task
    runtime.start_task = None
    if task is not None and not task.done():
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    await runtime.bridge.async_stop()

    for unsub in runtime.unsubs:
        try:
            unsub()
        except Exception:  # pragma: no cover - defensive logging
            _LOGGER.exception("Failed to remove state listener")
    runtime.unsubs.clear()


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry for Helios KWL."""
    domain_data = hass.data.get(DOMAIN)
    runtime = domain_data.get(entry.entry_id) if domain_data else None
    if runtime is None:
        return True

    await _async_shutdown_entry(runtime)

    ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if ok and domain_data:
        domain_data.pop(entry.entry_id, None)
    return ok


async def async_update_entry_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so new interval and pages take effect."""
    await hass.config_entries.async_reload(entry.entry_id)
