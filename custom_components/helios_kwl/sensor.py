"""Sensor entities for read-only Helios KWL values."""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity

from .entity import HeliosStateEntity, async_setup_state_platform, is_connection_entry
from .runtime import EntryRuntime
from .state import StateEntry


def _sensor_factory(runtime: EntryRuntime, state: StateEntry) -> SensorEntity | None:
    if is_connection_entry(state) or state.meta.writable:
        return None
    return HeliosSensor(runtime, state)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up sensors for read-only state entries."""
    await async_setup_state_platform(hass, entry, async_add_entities, _sensor_factory)


class HeliosSensor(HeliosStateEntity, SensorEntity):
    """Read-only device value."""

    @property
    def native_value(self) -> Any:
        """Return the last value read from the device."""

        entry = self.state_entry
        return entry.value if entry is not None else None
