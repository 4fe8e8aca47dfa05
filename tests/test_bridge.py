from __future__ import annotations

import asyncio
import logging

import pytest

from conftest import (
    HOST,
    FakeIntervalTracker,
    FakeSession,
    MockResponse,
    no_sleep,
    page_body,
)
from custom_components.helios_kwl.api import HeliosClient
from custom_components.helios_kwl.bridge import HeliosBridge, clamp_poll_interval
from custom_components.helios_kwl.const import CONNECTION_PATH, DEFAULT_UPDATE_PAGES
from custom_components.helios_kwl.state import StateStore


def _bridge(client: HeliosClient, store: StateStore, **kwargs) -> HeliosBridge:
    kwargs.setdefault("password", "helios")
    kwargs.setdefault("complete_pages", (1, 2, 3))
    kwargs.setdefault("update_pages", (3,))
    return HeliosBridge(client, store, sleep=no_sleep, **kwargs)


def _serve_device(fake_session: FakeSession) -> None:
    fake_session.always("/info.htm", MockResponse(200, "ok"))
    fake_session.always("/data/werte1.xml", MockResponse(200, page_body(("v00104", "4.5"))))
    fake_session.always("/data/werte2.xml", MockResponse(404, "Not Found"))
    fake_session.always("/data/werte3.xml", MockResponse(200, page_body(("v00102", "1"))))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(30, 30), ("15", 15), (0, 1), (-5, 1), (None, 30), ("x", 30)],
)
def test_clamp_poll_interval(raw: object, expected: int) -> None:
    assert clamp_poll_interval(raw) == expected


def test_defaults(client: HeliosClient, store: StateStore) -> None:
    bridge = HeliosBridge(client, store, password="helios")

    assert bridge.update_pages == DEFAULT_UPDATE_PAGES
    assert bridge.complete_pages == tuple(range(1, 18))
    assert bridge.poll_interval == 30
    assert bridge.store is store


@pytest.mark.asyncio
async def test_start_logs_in_and_polls_everything(
    client: HeliosClient, store: StateStore, fake_session: FakeSession
) -> None:
    _serve_device(fake_session)
    bridge = _bridge(client, store)

    assert await bridge.async_start() is True

    assert fake_session.paths == [
        "/info.htm",
        "/data/werte1.xml",
        "/data/werte2.xml",
        "/data/werte3.xml",
    ]
    assert bridge.connected is True
    assert store.get(CONNECTION_PATH).value is True
    assert store.get("Outdoor_air_temperature").value == 4.5
    assert store.get("Fan_stage").value == 1
    snapshot = bridge.as_dict()
    assert snapshot["ignored_pages"] == [2]
    assert snapshot["created_identifiers"] == ["v00102", "v00104"]
    assert snapshot["started"] is True

    await bridge.async_stop()
    assert bridge.connected is False
    assert store.get(CONNECTION_PATH).value is False


@pytest.mark.asyncio
async def test_start_without_password_stays_idle(
    client: HeliosClient,
    store: StateStore,
    fake_session: FakeSession,
    caplog: pytest.LogCaptureFixture,
) -> None:
    bridge = _bridge(client, store, password="")

    with caplog.at_level(logging.WARNING):
        assert await bridge.async_start() is False

    assert fake_session.post_calls == []
    assert store.get(CONNECTION_PATH).value is False
    assert not bridge.started
    await bridge.async_stop()


@pytest.mark.asyncio
async def test_failed_login_still_polls(
    client: HeliosClient, store: StateStore, fake_session: FakeSession
) -> None:
    _serve_device(fake_session)
    fake_session.queue("/info.htm", MockResponse(500, "busy"))
    bridge = _bridge(client, store)

    await bridge.async_start()

    assert bridge.connected is False
    assert store.get("Fan_stage").value == 1
    await bridge.async_stop()


@pytest.mark.asyncio
async def test_recurring_poll_uses_update_pages(
    client: HeliosClient,
    store: StateStore,
    fake_session: FakeSession,
    tracker: FakeIntervalTracker,
) -> None:
    _serve_device(fake_session)
    bridge = _bridge(client, store, poll_interval=15, track_interval=tracker)

    await bridge.async_start()

    assert sorted(tracker.intervals) == [15, 300]
    assert bridge.update_poll.running
    fake_session.post_calls.clear()
    tracker.fire(15)
    await asyncio.sleep(0.05)

    assert fake_session.paths == ["/data/werte3.xml"]
    result = await bridge.async_poll_update()
    assert result.polled == [3]
    await bridge.async_stop()
    assert tracker.listeners == []


@pytest.mark.asyncio
async def test_write_back_confirm_polls_complete_list(
    client: HeliosClient, store: StateStore, fake_session: FakeSession
) -> None:
    _serve_device(fake_session)
    bridge = _bridge(client, store, confirm_delay=0.01)
    await bridge.async_start()
    fake_session.post_calls.clear()

    await store.async_set("Fan_stage", 3, ack=False)
    await asyncio.sleep(0.1)

    assert fake_session.paths == [
        "/info.htm",
        "/data/werte1.xml",
        "/data/werte3.xml",
    ]
    assert fake_session.calls_for("/info.htm") == ["v00102=3"]
    # The confirmation poll re-reads the device value.
    assert store.get("Fan_stage").value == 1
    assert store.get("Fan_stage").ack is True
    await bridge.async_stop()


@pytest.mark.asyncio
async def test_unauthorized_poll_schedules_single_relogin(
    client: HeliosClient, store: StateStore, fake_session: FakeSession
) -> None:
    _serve_device(fake_session)
    bridge = _bridge(client, store)
    await bridge.async_start()
    loop = asyncio.get_running_loop()

    fake_session.queue("/data/werte1.xml", MockResponse(401, "expired"))
    await bridge.async_poll_complete()
    first = bridge.session.relogin.handle
    fake_session.queue("/data/werte1.xml", MockResponse(401, "expired"))
    await bridge.async_poll_complete()
    second = bridge.session.relogin.handle

    assert bridge.connected is False
    assert first is not None and first.cancelled()
    assert second is not None and not second.cancelled()
    assert second.when() - loop.time() == pytest.approx(30, abs=1)
    assert bridge.as_dict()["relogin_pending"] is True

    await bridge.async_stop()
    assert second.cancelled()


@pytest.mark.asyncio
async def test_stop_cancels_timers_and_is_repeatable(
    client: HeliosClient,
    store: StateStore,
    fake_session: FakeSession,
    tracker: FakeIntervalTracker,
) -> None:
    _serve_device(fake_session)
    bridge = _bridge(client, store, track_interval=tracker)
    await bridge.async_start()

    assert bridge.session.refresh.running
    await bridge.async_stop()
    await bridge.async_stop()

    assert not bridge.session.refresh.running
    assert not bridge.update_poll.running
    assert tracker.listeners == []
    assert not bridge.started


@pytest.mark.asyncio
async def test_stop_without_start(client: HeliosClient, store: StateStore) -> None:
    bridge = _bridge(client, store)

    await bridge.async_stop()

    assert bridge.connected is False


def test_host_is_used_for_requests(client: HeliosClient) -> None:
    assert client.host == HOST
