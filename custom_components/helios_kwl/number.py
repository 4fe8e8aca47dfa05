"""Number entities for writable numeric Helios KWL values."""

from __future__ import annotations

import logging

from homeassistant.components.number import NumberEntity, NumberMode

from .entity import HeliosStateEntity, async_setup_state_platform, is_connection_entry
from .parser import ValueType
from .runtime import EntryRuntime
from .state import StateEntry

_LOGGER = logging.getLogger(__name__)

# Fallback range for variables without catalog bounds
DEFAULT_MIN_VALUE = -65535.0
DEFAULT_MAX_VALUE = 65535.0


def _number_factory(runtime: EntryRuntime, state: StateEntry) -> NumberEntity | None:
    if is_connection_entry(state) or not state.meta.writable:
        return None
    if state.meta.value_type is not ValueType.NUMBER:
        return None
    return HeliosNumber(runtime, state)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up numbers for writable numeric state entries."""
    await async_setup_state_platform(hass, entry, async_add_entities, _number_factory)


class HeliosNumber(HeliosStateEntity, NumberEntity):
    """Writable numeric device variable."""

    _attr_mode = NumberMode.BOX

    def __init__(self, runtime: EntryRuntime, state: StateEntry) -> None:
        """Apply catalog bounds and the step implied by the first value."""
        super().__init__(runtime, state)
        meta = state.meta
        self._attr_native_min_value = (
            float(meta.minimum) if meta.minimum is not None else DEFAULT_MIN_VALUE
        )
        self._attr_native_max_value = (
            float(meta.maximum) if meta.maximum is not None else DEFAULT_MAX_VALUE
        )
        self._integral = not isinstance(state.value, float)
        self._attr_native_step = 1.0 if self._integral else 0.1

    @property
    def native_value(self) -> float | None:
        """Return the last value read from the device."""

        entry = self.state_entry
        if entry is None or isinstance(entry.value, str) or entry.value is None:
            return None
        return entry.value

    async def async_set_native_value(self, value: float) -> None:
        """Request a new value; the bridge relays it to the device."""

        if self._integral and float(value).is_integer():
            value = int(value)
        _LOGGER.debug("Requesting %s = %s", self.path, value)
        await self._runtime.store.async_set(self.path, value, ack=False)
        self.async_write_ha_state()
