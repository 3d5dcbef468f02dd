# tests/query/test_unread_poller.py
import asyncio

import pytest

from app.clients.portal import NetworkError
from app.query.client import QueryClient
from app.query.keys import UNREAD_COUNT_KEY
from app.query.polling import DocumentVisibility, UnreadCountPoller

pytestmark = pytest.mark.asyncio


class CountSource:
    def __init__(self):
        self.calls = 0
        self.gate: asyncio.Event | None = None

    async def __call__(self, key):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        return {"count": self.calls}


async def test_polls_on_interval_while_visible():
    source = CountSource()
    client = QueryClient(query_fn=source)
    visibility = DocumentVisibility(visible=True)

    async with UnreadCountPoller(client, visibility, interval=0.01) as poller:
        assert poller.running
        await asyncio.sleep(0.1)

    assert source.calls >= 2
    assert client.get_query_data(UNREAD_COUNT_KEY)["count"] >= 2


async def test_no_polling_while_hidden():
    source = CountSource()
    client = QueryClient(query_fn=source)
    visibility = DocumentVisibility(visible=False)

    async with UnreadCountPoller(client, visibility, interval=0.01):
        await asyncio.sleep(0.05)

    assert source.calls == 0


async def test_becoming_visible_polls_immediately():
    source = CountSource()
    client = QueryClient(query_fn=source)
    visibility = DocumentVisibility(visible=False)

    async with UnreadCountPoller(client, visibility, interval=60):
        visibility.set_visible(True)
        await asyncio.sleep(0.01)

    assert source.calls == 1
    assert client.get_query_data(UNREAD_COUNT_KEY) == {"count": 1}


async def test_stop_detaches_everything():
    source = CountSource()
    client = QueryClient(query_fn=source)
    visibility = DocumentVisibility(visible=True)
    poller = UnreadCountPoller(client, visibility, interval=0.01)

    poller.start()
    assert visibility.listener_count == 1
    await poller.stop()
    calls_at_stop = source.calls
    visibility.set_visible(False)
    visibility.set_visible(True)
    await asyncio.sleep(0.05)

    assert not poller.running
    assert visibility.listener_count == 0
    assert source.calls == calls_at_stop


async def test_in_flight_poll_finishes_after_stop():
    source = CountSource()
    source.gate = asyncio.Event()
    client = QueryClient(query_fn=source)
    visibility = DocumentVisibility(visible=False)
    poller = UnreadCountPoller(client, visibility, interval=60)

    poller.start()
    visibility.set_visible(True)
    await asyncio.sleep(0)
    await poller.stop()
    source.gate.set()
    await asyncio.sleep(0.01)

    assert client.get_query_data(UNREAD_COUNT_KEY) == {"count": 1}


async def test_failed_poll_is_swallowed():
    async def offline(key):
        raise NetworkError("offline")

    client = QueryClient(query_fn=offline)
    poller = UnreadCountPoller(client, DocumentVisibility())

    assert await poller.poll_once() is None
    assert client.get_query_data(UNREAD_COUNT_KEY) is None


async def test_start_is_idempotent():
    client = QueryClient(query_fn=CountSource())
    visibility = DocumentVisibility()
    poller = UnreadCountPoller(client, visibility, interval=60)

    poller.start()
    poller.start()

    assert visibility.listener_count == 1
    await poller.stop()
