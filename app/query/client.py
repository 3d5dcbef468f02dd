# app/query/client.py

import asyncio
import copy
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from app.clients.portal import PortalClient
from app.query.retry import MutationRetryPolicy, QueryRetryPolicy, RetryPolicy, run_with_retry
from app.query.strategies import CachePolicy, policy_for_key

logger = logging.getLogger(__name__)

QueryKey = Tuple[Any, ...]
QueryFn = Callable[[QueryKey], Awaitable[Any]]
Listener = Callable[[QueryKey, Any], None]


class QueryCancelledError(Exception):
    """The fetch a caller was waiting on was cancelled by cancel_queries."""


@dataclass
class QueryState:
    key: QueryKey
    data: Any = None
    has_data: bool = False
    updated_at: float | None = None
    last_used_at: float = 0.0
    is_invalidated: bool = False
    error: BaseException | None = None
    query_fn: Optional[QueryFn] = None
    fetch_task: Optional[asyncio.Task] = None
    listeners: List[Listener] = field(default_factory=list)


@dataclass
class Snapshot:
    """Deep copies of cached values keyed by full key. None marks a key that was absent."""
    entries: Dict[QueryKey, Optional[Tuple[Any, float | None]]]


def _as_key(key: Sequence[Any]) -> QueryKey:
    return tuple(key)


def matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[:len(prefix)] == prefix


class QueryClient:
    """
    In-process query cache. Built explicitly and handed to every consumer.

    Entries are keyed by tuples of URL segments, go stale after their tier's
    stale_time and are dropped by collect_garbage once unused for gc_time.
    Concurrent fetches of one key share a single task.
    """
    def __init__(
        self,
        portal: PortalClient | None = None,
        query_fn: Optional[QueryFn] = None,
        query_retry: RetryPolicy | None = None,
        mutation_retry: RetryPolicy | None = None,
        policy_resolver: Callable[[QueryKey], CachePolicy] = policy_for_key,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if query_fn is None and portal is not None:
            query_fn = portal.get_json
        self.portal = portal
        self.default_query_fn = query_fn
        self.query_retry = query_retry or QueryRetryPolicy()
        self.mutation_retry = mutation_retry or MutationRetryPolicy()
        self.policy_resolver = policy_resolver
        self.clock = clock
        self.sleep = sleep
        self._queries: Dict[QueryKey, QueryState] = {}

    # --- Reading and writing cached data ---

    def get_query_state(self, key: Sequence[Any]) -> QueryState | None:
        return self._queries.get(_as_key(key))

    def get_query_data(self, key: Sequence[Any]) -> Any:
        state = self._queries.get(_as_key(key))
        if state is None or not state.has_data:
            return None
        state.last_used_at = self.clock()
        return state.data

    def set_query_data(self, key: Sequence[Any], updater: Any) -> Any:
        """
        Writes a value, or applies `updater(old)` when a callable is given.
        A None result for a key with no data leaves the cache untouched.
        """
        key = _as_key(key)
        state = self._queries.get(key)
        old = state.data if state is not None and state.has_data else None
        new = updater(old) if callable(updater) else updater
        if new is None and old is None:
            return None
        state = self._ensure_state(key)
        now = self.clock()
        state.data = new
        state.has_data = True
        state.updated_at = now
        state.last_used_at = now
        self._notify(state)
        return new

    def keys(self, prefix: Sequence[Any] = ()) -> List[QueryKey]:
        prefix = _as_key(prefix)
        return [key for key in self._queries if matches(key, prefix)]

    def is_stale(self, key: Sequence[Any]) -> bool:
        state = self._queries.get(_as_key(key))
        if state is None or not state.has_data or state.is_invalidated or state.updated_at is None:
            return True
        return self.clock() - state.updated_at >= self.policy_resolver(state.key).stale_time

    def subscribe(self, key: Sequence[Any], listener: Listener) -> Callable[[], None]:
        """Calls listener(key, data) on every write. Returns the unsubscribe function."""
        state = self._ensure_state(_as_key(key))
        state.listeners.append(listener)

        def unsubscribe():
            if listener in state.listeners:
                state.listeners.remove(listener)
                state.last_used_at = self.clock()
        return unsubscribe

    # --- Fetching ---

    async def fetch_query(
        self,
        key: Sequence[Any],
        query_fn: Optional[QueryFn] = None,
        force: bool = False,
        retry: RetryPolicy | None = None,
    ) -> Any:
        """
        Returns fresh cached data, or fetches it. Joins the in-flight fetch
        for the key if there is one.
        """
        key = _as_key(key)
        state = self._ensure_state(key)
        if query_fn is not None:
            state.query_fn = query_fn
        elif state.query_fn is None:
            state.query_fn = self.default_query_fn
        if state.query_fn is None:
            raise ValueError(f"No query function for key {key!r}")

        if not force and not self.is_stale(key):
            state.last_used_at = self.clock()
            return state.data

        task = state.fetch_task
        if task is None or task.done():
            task = asyncio.create_task(self._run_fetch(state, retry or self.query_retry))
            state.fetch_task = task

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise QueryCancelledError(f"Fetch for {key!r} was cancelled") from None
            raise

    async def _run_fetch(self, state: QueryState, retry: RetryPolicy) -> Any:
        query_fn = state.query_fn
        try:
            data = await run_with_retry(
                lambda: query_fn(state.key), retry, sleep=self.sleep, description=f"query {state.key!r}"
            )
        except Exception as e:
            state.error = e
            raise
        finally:
            if state.fetch_task is asyncio.current_task():
                state.fetch_task = None

        now = self.clock()
        state.data = data
        state.has_data = True
        state.updated_at = now
        state.last_used_at = now
        state.is_invalidated = False
        state.error = None
        self._notify(state)
        return data

    async def cancel_queries(self, prefix: Sequence[Any]):
        """Cancels in-flight fetches under the prefix. Cached data is left as it was."""
        tasks = []
        for key in self.keys(prefix):
            state = self._queries[key]
            task = state.fetch_task
            if task is not None and not task.done():
                task.cancel()
                tasks.append(task)
            state.fetch_task = None
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.debug(f"Cancelled {len(tasks)} in-flight fetch(es) under {tuple(prefix)!r}.")

    async def invalidate_queries(self, prefix: Sequence[Any], refetch: bool = True):
        """
        Marks entries under the prefix stale and refetches those that have a query function.
        Refetch failures are logged; the stale data stays in place.
        """
        keys = self.keys(prefix)
        for key in keys:
            self._queries[key].is_invalidated = True
        if not refetch:
            return
        refetchable = [
            key for key in keys
            if self._queries[key].query_fn is not None or self.default_query_fn is not None
        ]
        results = await asyncio.gather(
            *(self.fetch_query(key, force=True) for key in refetchable), return_exceptions=True
        )
        for key, result in zip(refetchable, results):
            if isinstance(result, BaseException):
                logger.warning(f"Refetch after invalidation failed for {key!r}: {result}")

    def remove_queries(self, prefix: Sequence[Any]):
        for key in self.keys(prefix):
            state = self._queries.pop(key)
            if state.fetch_task is not None and not state.fetch_task.done():
                state.fetch_task.cancel()

    def collect_garbage(self) -> int:
        """Drops entries nobody listens to that were unused for longer than their gc_time."""
        now = self.clock()
        expired = [
            key for key, state in self._queries.items()
            if not state.listeners
            and (state.fetch_task is None or state.fetch_task.done())
            and now - state.last_used_at >= self.policy_resolver(key).gc_time
        ]
        for key in expired:
            del self._queries[key]
        return len(expired)

    # --- Mutations ---

    async def run_mutation(self, mutation: Callable[[], Awaitable[Any]], retry: RetryPolicy | None = None) -> Any:
        return await run_with_retry(mutation, retry or self.mutation_retry, sleep=self.sleep, description="mutation")

    def snapshot(self, prefixes: Iterable[Sequence[Any]]) -> Snapshot:
        entries: Dict[QueryKey, Optional[Tuple[Any, float | None]]] = {}
        for prefix in prefixes:
            prefix = _as_key(prefix)
            entries.setdefault(prefix, None)
            for key in self.keys(prefix):
                state = self._queries[key]
                if state.has_data:
                    entries[key] = (copy.deepcopy(state.data), state.updated_at)
        return Snapshot(entries=entries)

    def restore(self, snapshot: Snapshot):
        """Puts every snapshotted key back exactly; keys that were absent lose their data."""
        for key, entry in snapshot.entries.items():
            state = self._queries.get(key)
            if entry is None:
                if state is not None and state.has_data:
                    state.data = None
                    state.has_data = False
                    state.updated_at = None
                    self._notify(state)
                continue
            data, updated_at = entry
            state = self._ensure_state(key)
            state.data = data
            state.has_data = True
            state.updated_at = updated_at
            self._notify(state)

    # --- Persistence support ---

    def dehydrate(self) -> List[Dict[str, Any]]:
        return [
            {"key": list(state.key), "data": state.data, "updated_at": state.updated_at}
            for state in self._queries.values()
            if state.has_data
        ]

    def hydrate(self, entries: Iterable[Dict[str, Any]]) -> int:
        count = 0
        for entry in entries:
            state = self._ensure_state(_as_key(entry["key"]))
            state.data = entry["data"]
            state.has_data = True
            state.updated_at = entry.get("updated_at")
            state.last_used_at = self.clock()
            count += 1
        return count

    # --- Internals ---

    def _ensure_state(self, key: QueryKey) -> QueryState:
        state = self._queries.get(key)
        if state is None:
            state = QueryState(key=key, last_used_at=self.clock())
            self._queries[key] = state
        return state

    def _notify(self, state: QueryState):
        for listener in list(state.listeners):
            try:
                listener(state.key, state.data)
            except Exception:
                logger.error(f"Query listener failed for {state.key!r}", exc_info=True)
