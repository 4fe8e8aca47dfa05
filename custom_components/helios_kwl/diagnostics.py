"""Diagnostics support for the Helios KWL integration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_PASSWORD
from .runtime import require_runtime

SENSITIVE_FIELDS: Final = {CONF_PASSWORD}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> Mapping[str, Any]:
    """Return a diagnostics payload for ``entry``."""

    runtime = require_runtime(hass, entry.entry_id)
    states = [
        {
            "path": state.path,
            "variable": state.meta.variable,
            "type": str(state.meta.value_type),
            "writable": state.meta.writable,
            "value": state.value,
            "ack": state.ack,
        }
        for state in runtime.store
    ]
    return {
        "entry": {
            "title": entry.title,
            "data": async_redact_data(dict(entry.data), SENSITIVE_FIELDS),
            "options": dict(entry.options),
        },
        "bridge": runtime.bridge.as_dict(),
        "states": states,
    }
