# ruff: noqa: D100,D101,D102,D103,D105,D107,INP001
from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import pytest

from custom_components.helios_kwl.api import HeliosClient
from custom_components.helios_kwl.state import StateStore

HOST = "192.168.1.50"
PASSWORD = "helios"


class MockResponse:
    def __init__(self, status: int = 200, text_data: str = "") -> None:
        self.status = status
        self._text = text_data
        self.headers: dict[str, str] = {}
        self.request_info = None
        self.history = ()

    async def __aenter__(self) -> MockResponse:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def text(self) -> str:
        return self._text


class FakeSession:
    """Stand-in for ``aiohttp.ClientSession`` routing POSTs by path."""

    def __init__(self) -> None:
        self._routes: dict[str, deque[Any]] = defaultdict(deque)
        self._defaults: dict[str, Any] = {}
        self.post_calls: list[tuple[str, str, dict[str, Any]]] = []

    def queue(self, path: str, *responses: Any) -> None:
        """Queue one-shot responses (or exceptions) for ``path``."""

        self._routes[path].extend(responses)

    def always(self, path: str, response: Any) -> None:
        """Answer ``path`` with ``response`` whenever the queue is empty."""

        self._defaults[path] = response

    def calls_for(self, path: str) -> list[str]:
        return [data for url, data, _ in self.post_calls if url.endswith(path)]

    @property
    def paths(self) -> list[str]:
        return [url.split(HOST, 1)[-1] for url, _, _ in self.post_calls]

    def post(self, url: str, *, data: str, headers: dict[str, Any], timeout: Any):
        self.post_calls.append((url, data, headers))
        path = url.split(HOST, 1)[-1]
        queue = self._routes.get(path)
        if queue:
            response = queue.popleft()
        elif path in self._defaults:
            response = self._defaults[path]
        else:
            response = MockResponse(404, "Not Found")
        if isinstance(response, BaseException):
            raise response
        return response


def page_body(*pairs: tuple[str, str]) -> str:
    """Return a page body in the device's ID/VA grammar."""

    items = "".join(f"<ID>{ident}</ID>\n<VA>{value}</VA>\n" for ident, value in pairs)
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<PARAMETER>\n{items}</PARAMETER>\n'


async def no_sleep(_delay: float) -> None:
    return None


class FakeIntervalTracker:
    """Record interval listeners in place of ``async_track_time_interval``."""

    def __init__(self) -> None:
        self.listeners: list[tuple[Callable[[datetime], Any], timedelta]] = []
        self.removed: list[Callable[[datetime], Any]] = []

    def __call__(
        self, action: Callable[[datetime], Any], interval: timedelta
    ) -> Callable[[], None]:
        entry = (action, interval)
        self.listeners.append(entry)

        def _remove() -> None:
            self.listeners.remove(entry)
            self.removed.append(action)

        return _remove

    @property
    def intervals(self) -> list[float]:
        return [interval.total_seconds() for _, interval in self.listeners]

    def fire(self, seconds: float | None = None) -> None:
        """Invoke every listener, or only those with the given period."""

        now = datetime.now()
        for action, interval in list(self.listeners):
            if seconds is None or interval.total_seconds() == seconds:
                action(now)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def tracker() -> FakeIntervalTracker:
    return FakeIntervalTracker()


@pytest.fixture
def client(fake_session: FakeSession) -> HeliosClient:
    return HeliosClient(fake_session, HOST, PASSWORD)  # type: ignore[arg-type]


@pytest.fixture
def store() -> StateStore:
    return StateStore()
