"""Sequential poller for the device data pages."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
import logging

import aiohttp

from .api import HeliosAuthError, HeliosClient, HeliosNotFoundError, HeliosRequestError
from .const import REQUEST_DELAY
from .session import SessionManager
from .timers import SleepCallable
from .translator import StateTranslator

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PollResult:
    """Outcome of one poll batch."""

    polled: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    aborted: bool = False


class PagePoller:
    """Fetch data pages one at a time and hand them to the translator.

    A page that answers 404 is remembered and never requested again for the
    lifetime of the poller.
    """

    def __init__(
        self,
        client: HeliosClient,
        session: SessionManager,
        translator: StateTranslator,
        *,
        request_delay: float = REQUEST_DELAY,
        sleep: SleepCallable | None = None,
    ) -> None:
        """Initialise the poller with its collaborators."""
        self._client = client
        self._session = session
        self._translator = translator
        self._request_delay = request_delay
        self._sleep = sleep or asyncio.sleep
        self._ignored: set[int] = set()
        self._lock = asyncio.Lock()

    @property
    def ignored_pages(self) -> frozenset[int]:
        """Return the pages excluded after a 404."""

        return frozenset(self._ignored)

    async def async_poll(self, pages: Iterable[int]) -> PollResult:
        """Poll ``pages`` in order; batches never overlap."""

        async with self._lock:
            return await self._async_poll(tuple(pages))

    async def _async_poll(self, pages: tuple[int, ...]) -> PollResult:
        result = PollResult()
        for page in pages:
            if page in self._ignored:
                result.skipped.append(page)
                continue

            await self._sleep(self._request_delay)
            try:
                body = await self._client.fetch_page(page)
            except asyncio.CancelledError:
                raise
            except HeliosAuthError:
                result.failed.append(page)
                result.aborted = True
                await self._session.async_set_connected(False)
                self._session.schedule_relogin()
                break
            except HeliosNotFoundError:
                self._ignored.add(page)
                result.failed.append(page)
                _LOGGER.info(
                    "Page %s is not supported by this device; ignoring it", page
                )
                continue
            except HeliosRequestError as err:
                result.failed.append(page)
                _LOGGER.error("Page %s failed: %s", page, err)
                if err.body:
                    _LOGGER.error("Page %s response: %s", page, err.body)
                continue
            except (aiohttp.ClientError, TimeoutError) as err:
                result.failed.append(page)
                _LOGGER.error("Page %s failed: %s", page, err)
                continue

            _LOGGER.debug("Page %s: %d bytes", page, len(body))
            await self._translator.async_translate(body)
            result.polled.append(page)

        _LOGGER.debug(
            "Poll finished: polled=%s skipped=%s failed=%s aborted=%s",
            result.polled,
            result.skipped,
            result.failed,
            result.aborted,
        )
        return result


__all__ = ["PagePoller", "PollResult"]
