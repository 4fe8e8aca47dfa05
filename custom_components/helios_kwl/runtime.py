"""Runtime container for Helios KWL config entries."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo

from .api import HeliosClient
from .bridge import HeliosBridge
from .const import DOMAIN, MANUFACTURER
from .state import StateStore


@dataclass(slots=True)
class EntryRuntime:
    """Objects owned by one configured ventilation unit."""

    config_entry: ConfigEntry
    client: HeliosClient
    store: StateStore
    bridge: HeliosBridge
    start_task: asyncio.Task | None = None
    unsubs: list[Callable[[], None]] = field(default_factory=list)
    _shutdown_complete: bool = False

    @property
    def entry_id(self) -> str:
        """Return the config entry id."""

        return self.config_entry.entry_id

    @property
    def device_info(self) -> DeviceInfo:
        """Return the device registry info shared by every entity."""

        return DeviceInfo(
            identifiers={(DOMAIN, self.config_entry.entry_id)},
            manufacturer=MANUFACTURER,
            name=self.config_entry.title or f"{MANUFACTURER} KWL",
            configuration_url=f"http://{self.client.host}/",
        )


def require_runtime(hass: HomeAssistant, entry_id: str) -> EntryRuntime:
    """Return the runtime container stored for ``entry_id``."""

    domain_data = hass.data.get(DOMAIN)
    if not isinstance(domain_data, dict):
        raise LookupError("Helios KWL runtime data is unavailable")  # noqa: TRY004
    runtime = domain_data.get(entry_id)
    if not isinstance(runtime, EntryRuntime):
        raise LookupError(f"No Helios KWL runtime for entry {entry_id}")
    return runtime


__all__ = ["EntryRuntime", "require_runtime"]
