"""Text entities for writable non-numeric Helios KWL values."""

from __future__ import annotations

import logging

from homeassistant.components.text import TextEntity

from .entity import HeliosStateEntity, async_setup_state_platform, is_connection_entry
from .parser import ValueType
from .runtime import EntryRuntime
from .state import StateEntry

_LOGGER = logging.getLogger(__name__)


def _text_factory(runtime: EntryRuntime, state: StateEntry) -> TextEntity | None:
    if is_connection_entry(state) or not state.meta.writable:
        return None
    if state.meta.value_type is not ValueType.MIXED:
        return None
    return HeliosText(runtime, state)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up text entities for writable mixed state entries."""
    await async_setup_state_platform(hass, entry, async_add_entities, _text_factory)


class HeliosText(HeliosStateEntity, TextEntity):
    """Writable device variable holding free text (dates, times, names)."""

    @property
    def native_value(self) -> str | None:
        """Return the last value read from the device."""

        entry = self.state_entry
        if entry is None or entry.value is None:
            return None
        return str(entry.value)

    async def async_set_value(self, value: str) -> None:
        """Request a new value; the bridge relays it to the device."""

        _LOGGER.debug("Requesting %s = %s", self.path, value)
        await self._runtime.store.async_set(self.path, value, ack=False)
        self.async_write_ha_state()
