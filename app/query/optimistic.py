# app/query/optimistic.py

import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Sequence

from app.query.client import QueryClient
from app.query.retry import RetryPolicy

logger = logging.getLogger(__name__)


async def optimistic_mutation(
    client: QueryClient,
    keys: Iterable[Sequence[Any]],
    apply: Callable[[QueryClient], None],
    mutation: Callable[[], Awaitable[Any]],
    on_error: Optional[Callable[[BaseException], None]] = None,
    retry: RetryPolicy | None = None,
) -> Any:
    """
    Snapshot -> apply -> mutate -> (rollback on failure) -> invalidate.

    1. In-flight fetches under every key are cancelled so they cannot
       overwrite the optimistic value.
    2. The cached values are deep-copied.
    3. `apply(client)` patches the cache synchronously.
    4. `mutation()` runs with the mutation retry policy (or `retry`).
    5. On failure the snapshot is restored, `on_error` is called and the error re-raised.
    6. Success or failure, every key is invalidated and refetched.
    """
    keys = [tuple(key) for key in keys]
    for key in keys:
        await client.cancel_queries(key)

    snapshot = client.snapshot(keys)
    try:
        apply(client)
        return await client.run_mutation(mutation, retry=retry)
    except Exception as exc:
        client.restore(snapshot)
        logger.warning(f"Optimistic mutation on {keys!r} failed and was rolled back: {exc}")
        if on_error is not None:
            on_error(exc)
        raise
    finally:
        for key in keys:
            await client.invalidate_queries(key)
