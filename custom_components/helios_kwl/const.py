"""Constants for the Helios KWL integration."""

from __future__ import annotations

from typing import Final

# Domain
DOMAIN: Final = "helios_kwl"
MANUFACTURER: Final = "Helios"

# HTTP paths
LOGIN_PATH: Final = "/info.htm"
COMMAND_PATH: Final = LOGIN_PATH
PAGE_PATH_FMT: Final = "/data/werte{page}.xml"

# Form field carrying the device password
LOGIN_FIELD: Final = "v00402"

# Browser-like headers; the embedded web server only answers these reliably
USER_AGENT: Final = (
    "Mozilla/5.0 (Windows NT 10.0; WOW64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/86.0.4240.193 Safari/537.36"
)
ACCEPT_LANGUAGE: Final = "de,en-US;q=0.7,en;q=0.3"
CONTENT_TYPE: Final = "text/plain;charset=UTF-8"
REQUEST_TIMEOUT: Final = 25  # seconds

# Config keys
CONF_HOST: Final = "host"
CONF_PASSWORD: Final = "password"
CONF_POLL_INTERVAL: Final = "poll_interval"
CONF_UPDATE_PAGES: Final = "update_pages"

# Pages
COMPLETE_PAGES: Final[tuple[int, ...]] = tuple(range(1, 18))
DEFAULT_UPDATE_PAGES: Final[tuple[int, ...]] = (3, 4, 8, 12, 16)

# Polling
DEFAULT_POLL_INTERVAL: Final = 30  # seconds
MIN_POLL_INTERVAL: Final = 1  # seconds
REQUEST_DELAY: Final = 0.5  # seconds before each page request

# Session / write-back timers
REFRESH_LOGIN_INTERVAL: Final = 5 * 60  # seconds
UNAUTHORIZED_RETRY_DELAY: Final = 30  # seconds
WRITE_CONFIRM_DELAY: Final = 10  # seconds

# Well-known state entry published for connectivity
CONNECTION_PATH: Final = "info.connection"


def signal_entry_created(entry_id: str) -> str:
    """Signal name for newly created state entries dispatched to platforms."""

    return f"{DOMAIN}_{entry_id}_entry_created"


def signal_state_updated(entry_id: str, path: str) -> str:
    """Signal name for value updates of one state path."""

    return f"{DOMAIN}_{entry_id}_state_updated_{path}"


def parse_page_list(value: str | None) -> tuple[int, ...]:
    """Parse a comma separated page list such as ``"3, 4, 8"``.

    Raises ``ValueError`` for non-numeric or non-positive items. An empty
    value yields the default update pages.
    """

    if value is None:
        return DEFAULT_UPDATE_PAGES
    items = [item.strip() for item in str(value).split(",")]
    items = [item for item in items if item]
    if not items:
        return DEFAULT_UPDATE_PAGES
    pages: list[int] = []
    for item in items:
        page = int(item)
        if page <= 0:
            raise ValueError(f"Invalid page number: {item!r}")
        if page not in pages:
            pages.append(page)
    return tuple(pages)


def format_page_list(pages: tuple[int, ...] | list[int]) -> str:
    """Return ``pages`` as the comma separated text used by the options form."""

    return ", ".join(str(page) for page in pages)
