"""Connectivity binary sensor for the Helios KWL device."""

from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)

from .entity import HeliosStateEntity, async_setup_state_platform, is_connection_entry
from .runtime import EntryRuntime
from .state import StateEntry


def _connection_factory(
    runtime: EntryRuntime, state: StateEntry
) -> BinarySensorEntity | None:
    if not is_connection_entry(state):
        return None
    return HeliosConnectionBinarySensor(runtime, state)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up the connectivity sensor once its state entry exists."""
    await async_setup_state_platform(
        hass, entry, async_add_entities, _connection_factory
    )


class HeliosConnectionBinarySensor(HeliosStateEntity, BinarySensorEntity):
    """Whether the last login or poll reached the device."""

    _attr_device_class = BinarySensorDeviceClass.CONNECTIVITY

    @property
    def available(self) -> bool:
        """The connectivity sensor is always available."""

        return True

    @property
    def is_on(self) -> bool:
        """Return True when connected."""

        entry = self.state_entry
        return bool(entry is not None and entry.value)
