"""Entity base class and platform helpers shared by Helios KWL platforms."""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import Entity

from .const import CONNECTION_PATH, signal_entry_created, signal_state_updated
from .runtime import EntryRuntime, require_runtime
from .state import StateEntry

_LOGGER = logging.getLogger(__name__)

EntityFactory = Callable[[EntryRuntime, StateEntry], Entity | None]


class HeliosStateEntity(Entity):
    """Entity mirroring one state entry of the store."""

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(self, runtime: EntryRuntime, state: StateEntry) -> None:
        """Bind the entity to ``state``'s path."""
        self._runtime = runtime
        self._path = state.path
        self._attr_name = state.meta.name or state.path
        self._attr_unique_id = f"{runtime.entry_id}_{state.path}"
        self._attr_device_info = runtime.device_info

    @property
    def path(self) -> str:
        """Return the state path mirrored by this entity."""

        return self._path

    @property
    def state_entry(self) -> StateEntry | None:
        """Return the current store entry."""

        return self._runtime.store.get(self._path)

    @property
    def available(self) -> bool:
        """Return True while the device is reachable and a value is known."""

        entry = self.state_entry
        return self._runtime.bridge.connected and entry is not None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the device variable and its catalog remark."""

        entry = self.state_entry
        if entry is None:
            return {}
        attrs: dict[str, Any] = {"variable": entry.meta.variable}
        if entry.meta.remark:
            attrs["remark"] = entry.meta.remark
        return attrs

    async def async_added_to_hass(self) -> None:
        """Subscribe to value updates when the entity is added."""

        await super().async_added_to_hass()
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass,
                signal_state_updated(self._runtime.entry_id, self._path),
                self._handle_state_update,
            )
        )

    @callback
    def _handle_state_update(self, _state: StateEntry) -> None:
        self.async_write_ha_state()


async def async_setup_state_platform(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: Callable[[list[Entity]], None],
    factory: EntityFactory,
) -> None:
    """Add entities for known entries and for every entry created later."""

    runtime = require_runtime(hass, entry.entry_id)
    added: set[str] = set()

    def _build(states: list[StateEntry]) -> list[Entity]:
        entities: list[Entity] = []
        for state in states:
            if state.path in added:
                continue
            entity = factory(runtime, state)
            if entity is None:
                continue
            added.add(state.path)
            entities.append(entity)
        return entities

    initial = _build(list(runtime.store))
    if initial:
        async_add_entities(initial)

    @callback
    def _handle_created(state: StateEntry) -> None:
        entities = _build([state])
        if entities:
            _LOGGER.debug("Adding entity for %s", state.path)
            async_add_entities(entities)

    entry.async_on_unload(
        async_dispatcher_connect(
            hass, signal_entry_created(entry.entry_id), _handle_created
        )
    )


def is_connection_entry(state: StateEntry) -> bool:
    """Return True for the connectivity entry."""

    return state.path == CONNECTION_PATH


__all__ = [
    "EntityFactory",
    "HeliosStateEntity",
    "async_setup_state_platform",
    "is_connection_entry",
]
