# tests/query/test_query_client.py
import asyncio

import pytest

from app.clients.portal import ApiError
from app.query.client import QueryCancelledError, QueryClient
from app.query.keys import NOTIFICATIONS_KEY, ORDERS_KEY, PRODUCTS_KEY, UNREAD_COUNT_KEY, order_history_key
from app.query.retry import NO_RETRY, QueryRetryPolicy

pytestmark = pytest.mark.asyncio


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


async def no_sleep(delay: float):
    pass


class CountingFetcher:
    """Query function returning a fresh value per call, keyed by URL."""
    def __init__(self):
        self.calls = []

    async def __call__(self, key):
        self.calls.append(key)
        return {"key": list(key), "version": len(self.calls)}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return CountingFetcher()


@pytest.fixture
def query_client(clock, fetcher):
    return QueryClient(query_fn=fetcher, clock=clock, sleep=no_sleep)


async def test_fresh_data_is_served_from_cache(query_client, fetcher, clock):
    first = await query_client.fetch_query(ORDERS_KEY)
    clock.advance(30)
    second = await query_client.fetch_query(ORDERS_KEY)

    assert first == second
    assert len(fetcher.calls) == 1


async def test_stale_data_is_refetched(query_client, fetcher, clock):
    await query_client.fetch_query(NOTIFICATIONS_KEY)
    # notifications are real-time: stale after 30 s
    clock.advance(31)

    assert query_client.is_stale(NOTIFICATIONS_KEY)
    refreshed = await query_client.fetch_query(NOTIFICATIONS_KEY)
    assert refreshed["version"] == 2


async def test_static_data_stays_fresh_longer(query_client, fetcher, clock):
    await query_client.fetch_query(PRODUCTS_KEY)
    clock.advance(10 * 60)

    assert not query_client.is_stale(PRODUCTS_KEY)


async def test_concurrent_fetches_share_one_request(clock):
    release = asyncio.Event()
    calls = []

    async def slow_fetch(key):
        calls.append(key)
        await release.wait()
        return {"count": 3}

    client = QueryClient(query_fn=slow_fetch, clock=clock, sleep=no_sleep)
    waiters = [asyncio.create_task(client.fetch_query(UNREAD_COUNT_KEY)) for _ in range(3)]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*waiters)

    assert results == [{"count": 3}] * 3
    assert len(calls) == 1


async def test_failed_fetch_keeps_previous_data(clock):
    async def broken(key):
        raise ApiError(500, "Internal Server Error")

    client = QueryClient(query_fn=broken, clock=clock, sleep=no_sleep, query_retry=NO_RETRY)
    client.set_query_data(ORDERS_KEY, {"items": [1]})

    with pytest.raises(ApiError):
        await client.fetch_query(ORDERS_KEY, force=True)

    assert client.get_query_data(ORDERS_KEY) == {"items": [1]}
    assert isinstance(client.get_query_state(ORDERS_KEY).error, ApiError)


async def test_fetch_retries_with_query_policy(clock):
    attempts = []

    async def flaky(key):
        attempts.append(key)
        if len(attempts) < 3:
            raise ApiError(503, "Service Unavailable")
        return "ok"

    client = QueryClient(query_fn=flaky, clock=clock, sleep=no_sleep, query_retry=QueryRetryPolicy())

    assert await client.fetch_query(ORDERS_KEY) == "ok"
    assert len(attempts) == 3


async def test_cancel_leaves_cached_data_and_rejects_waiters(clock):
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_fetch(key):
        started.set()
        await release.wait()
        return "late"

    client = QueryClient(query_fn=slow_fetch, clock=clock, sleep=no_sleep)
    client.set_query_data(UNREAD_COUNT_KEY, {"count": 5})
    waiter = asyncio.create_task(client.fetch_query(UNREAD_COUNT_KEY, force=True))
    await started.wait()

    await client.cancel_queries(UNREAD_COUNT_KEY)

    with pytest.raises(QueryCancelledError):
        await waiter
    assert client.get_query_data(UNREAD_COUNT_KEY) == {"count": 5}


async def test_invalidate_refetches_by_prefix(query_client, fetcher):
    await query_client.fetch_query(order_history_key(1))
    await query_client.fetch_query(order_history_key(2))
    await query_client.fetch_query(PRODUCTS_KEY)
    fetcher.calls.clear()

    await query_client.invalidate_queries(("/api/orders",))

    assert sorted(fetcher.calls) == [order_history_key(1), order_history_key(2)]
    assert not query_client.is_stale(order_history_key(1))


async def test_invalidate_without_refetch_only_marks_stale(query_client, fetcher):
    await query_client.fetch_query(ORDERS_KEY)

    await query_client.invalidate_queries(ORDERS_KEY, refetch=False)

    assert query_client.is_stale(ORDERS_KEY)
    assert len(fetcher.calls) == 1


async def test_updater_returning_none_on_missing_key_is_noop(query_client):
    result = query_client.set_query_data(UNREAD_COUNT_KEY, lambda old: None if old is None else old)

    assert result is None
    assert query_client.keys() == []


async def test_subscribers_see_every_write(query_client):
    seen = []
    unsubscribe = query_client.subscribe(UNREAD_COUNT_KEY, lambda key, data: seen.append(data))

    query_client.set_query_data(UNREAD_COUNT_KEY, {"count": 1})
    await query_client.fetch_query(UNREAD_COUNT_KEY, force=True)
    unsubscribe()
    query_client.set_query_data(UNREAD_COUNT_KEY, {"count": 9})

    assert seen[0] == {"count": 1}
    assert len(seen) == 2


async def test_garbage_collection_after_gc_time(query_client, clock):
    await query_client.fetch_query(NOTIFICATIONS_KEY)
    await query_client.fetch_query(PRODUCTS_KEY)

    clock.advance(61)

    assert query_client.collect_garbage() == 1
    assert query_client.keys() == [PRODUCTS_KEY]


async def test_subscribed_entries_survive_garbage_collection(query_client, clock):
    await query_client.fetch_query(NOTIFICATIONS_KEY)
    query_client.subscribe(NOTIFICATIONS_KEY, lambda key, data: None)

    clock.advance(3600)

    assert query_client.collect_garbage() == 0


async def test_snapshot_and_restore(query_client):
    query_client.set_query_data(NOTIFICATIONS_KEY, {"items": [{"id": 1, "is_read": False}]})
    snapshot = query_client.snapshot([NOTIFICATIONS_KEY, UNREAD_COUNT_KEY])

    query_client.get_query_data(NOTIFICATIONS_KEY)["items"][0]["is_read"] = True
    query_client.set_query_data(UNREAD_COUNT_KEY, {"count": 0})
    query_client.restore(snapshot)

    assert query_client.get_query_data(NOTIFICATIONS_KEY) == {"items": [{"id": 1, "is_read": False}]}
    # Absent before the snapshot, absent after the restore
    assert query_client.get_query_data(UNREAD_COUNT_KEY) is None
