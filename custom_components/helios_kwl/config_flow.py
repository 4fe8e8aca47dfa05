"""Config flow handlers for the Helios KWL integration."""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import ClientError
from homeassistant import config_entries
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.data_entry_flow import FlowResult
import voluptuous as vol

from . import create_client
from .api import HeliosAuthError, HeliosRequestError
from .const import (
    CONF_HOST,
    CONF_PASSWORD,
    CONF_POLL_INTERVAL,
    CONF_UPDATE_PAGES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_UPDATE_PAGES,
    DOMAIN,
    MANUFACTURER,
    MIN_POLL_INTERVAL,
    format_page_list,
    parse_page_list,
)

_LOGGER = logging.getLogger(__name__)


def _user_schema(
    default_host: str = "", default_interval: int = DEFAULT_POLL_INTERVAL
) -> vol.Schema:
    """Build the setup form schema with provided defaults."""
    return vol.Schema(
        {
            vol.Required(CONF_HOST, default=default_host): str,
            vol.Required(CONF_PASSWORD): str,
            vol.Required(CONF_POLL_INTERVAL, default=default_interval): vol.All(
                vol.Coerce(int), vol.Range(min=MIN_POLL_INTERVAL)
            ),
        }
    )


async def _validate_login(hass: HomeAssistant, host: str, password: str) -> None:
    """Ensure the device accepts the password."""
    client = create_client(hass, host, password)
    await client.login()


class HeliosConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Set up a ventilation unit by address and password."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Collect address and password and create the config entry."""
        if user_input is None:
            return self.async_show_form(step_id="user", data_schema=_user_schema())

        host = (user_input.get(CONF_HOST) or "").strip()
        password = user_input.get(CONF_PASSWORD) or ""
        interval = user_input.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)

        errors: dict[str, str] = {}
        try:
            await _validate_login(self.hass, host, password)
        except HeliosAuthError:
            errors["base"] = "invalid_auth"
        except (TimeoutError, ClientError, HeliosRequestError):
            errors["base"] = "cannot_connect"
        except Exception:
            _LOGGER.exception("Unexpected error during user step")
            errors["base"] = "unknown"

        if errors:
            return self.async_show_form(
                step_id="user",
                data_schema=_user_schema(host, interval),
                errors=errors,
            )

        await self.async_set_unique_id(host.lower())
        self._abort_if_unique_id_configured()

        return self.async_create_entry(
            title=f"{MANUFACTURER} KWL ({host})",
            data={
                CONF_HOST: host,
                CONF_PASSWORD: password,
                CONF_POLL_INTERVAL: interval,
            },
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> HeliosOptionsFlow:
        """Return the options flow handler for this config entry."""
        return HeliosOptionsFlow(config_entry)


class HeliosOptionsFlow(config_entries.OptionsFlow):
    """Options flow for the poll interval and the recurring page list."""

    def __init__(self, entry: ConfigEntry) -> None:
        """Store the entry being configured."""
        self.entry = entry

    def _schema(self, interval: int, pages: str) -> vol.Schema:
        return vol.Schema(
            {
                vol.Required(CONF_POLL_INTERVAL, default=interval): vol.All(
                    vol.Coerce(int), vol.Range(min=MIN_POLL_INTERVAL)
                ),
                vol.Optional(CONF_UPDATE_PAGES, default=pages): str,
            }
        )

    async def async_step_init(self, user_input: dict[str, Any] | None = None) -> FlowResult:
        """Show or process the options form."""
        interval = int(
            self.entry.options.get(
                CONF_POLL_INTERVAL,
                self.entry.data.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL),
            )
        )
        pages = self.entry.options.get(
            CONF_UPDATE_PAGES, format_page_list(DEFAULT_UPDATE_PAGES)
        )

        errors: dict[str, str] = {}
        if user_input is not None:
            interval = user_input.get(CONF_POLL_INTERVAL, interval)
            pages = user_input.get(CONF_UPDATE_PAGES, pages)
            try:
                parsed = parse_page_list(pages)
            except ValueError:
                errors[CONF_UPDATE_PAGES] = "invalid_pages"
            else:
                return self.async_create_entry(
                    title="",
                    data={
                        CONF_POLL_INTERVAL: interval,
                        CONF_UPDATE_PAGES: format_page_list(parsed),
                    },
                )

        return self.async_show_form(
            step_id="init",
            data_schema=self._schema(interval, pages),
            errors=errors,
        )
