"""Async HTTP client for the Helios easyControls web interface."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
import logging
from types import MappingProxyType

import aiohttp

from .const import (
    ACCEPT_LANGUAGE,
    COMMAND_PATH,
    CONTENT_TYPE,
    LOGIN_FIELD,
    LOGIN_PATH,
    PAGE_PATH_FMT,
    REQUEST_TIMEOUT,
    USER_AGENT,
)
from .sanitize import redact_text

_LOGGER = logging.getLogger(__name__)

# Toggle to preview bodies in debug logs (redacted). Leave False by default.
API_LOG_PREVIEW = False


class HeliosApiError(Exception):
    """Base error raised by the Helios client."""


class HeliosRequestError(HeliosApiError):
    """The device answered with an unexpected HTTP status."""

    def __init__(self, status: int, body: str | None = None) -> None:
        """Store the status and (redacted) response body."""
        super().__init__(f"HTTP {status}")
        self.status = status
        self.body = body or ""


class HeliosAuthError(HeliosRequestError):
    """The device rejected the session (HTTP 401)."""


class HeliosNotFoundError(HeliosRequestError):
    """The requested resource does not exist on this device (HTTP 404)."""


def build_headers(host: str) -> Mapping[str, str]:
    """Return the immutable header set sent with every device request."""

    return MappingProxyType(
        {
            "Accept": "*/*",
            "Accept-Language": ACCEPT_LANGUAGE,
            "Content-Type": CONTENT_TYPE,
            "Referer": f"http://{host}/",
            "DNT": "1",
            "User-Agent": USER_AGENT,
        }
    )


def format_command_value(value: object) -> str:
    """Render a state value the way the device expects it in a command."""

    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class HeliosClient:
    """Thin async client for one ventilation unit (HA-safe).

    The embedded web server resets overlapping connections, so every request
    is serialised through a single lock.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        password: str,
    ) -> None:
        """Initialise the client with its shared session and credential."""
        self._session = session
        self._host = host.strip().rstrip("/")
        if "://" in self._host:
            self._host = self._host.split("://", 1)[1]
        self._password = password
        self._headers = build_headers(self._host)
        self._lock = asyncio.Lock()

    @property
    def host(self) -> str:
        """Return the device host name or address."""

        return self._host

    @property
    def headers(self) -> Mapping[str, str]:
        """Return the persistent request headers."""

        return self._headers

    def _url(self, path: str) -> str:
        return f"http://{self._host}{path}"

    async def _post(self, path: str, body: str) -> str:
        """POST ``body`` to ``path`` and return the response text.

        HTTP 401 and 404 map onto dedicated exceptions; other statuses from
        400 upwards raise ``HeliosRequestError``. Transport errors propagate
        as ``aiohttp.ClientError`` or ``TimeoutError``.
        """
        url = self._url(path)
        _LOGGER.debug("HTTP POST %s body=%s", url, redact_text(body))

        async with self._lock:
            async with self._session.post(
                url,
                data=body,
                headers=dict(self._headers),
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT),
            ) as resp:
                try:
                    text = await resp.text()
                except (aiohttp.ClientError, UnicodeDecodeError):
                    text = "<no body>"

        if resp.status == 401:
            raise HeliosAuthError(resp.status, redact_text(text))
        if resp.status == 404:
            raise HeliosNotFoundError(resp.status, redact_text(text))
        if resp.status >= 400:
            raise HeliosRequestError(resp.status, redact_text(text))

        if API_LOG_PREVIEW:
            _LOGGER.debug(
                "HTTP %s -> %s, body[0:200]=%r",
                url,
                resp.status,
                redact_text(text)[:200],
            )
        else:
            _LOGGER.debug("HTTP %s -> %s", url, resp.status)
        return text

    async def login(self) -> str:
        """Authenticate with the device password."""

        return await self._post(LOGIN_PATH, f"{LOGIN_FIELD}={self._password}")

    async def fetch_page(self, page: int) -> str:
        """Return the raw XML body of data page ``page``."""

        path = PAGE_PATH_FMT.format(page=page)
        return await self._post(path, f"xml={path}")

    async def send_command(self, variable: str, value: object) -> str:
        """Set device ``variable`` to ``value``."""

        return await self._post(
            COMMAND_PATH, f"{variable}={format_command_value(value)}"
        )


__all__ = [
    "HeliosApiError",
    "HeliosAuthError",
    "HeliosClient",
    "HeliosNotFoundError",
    "HeliosRequestError",
    "build_headers",
    "format_command_value",
]
