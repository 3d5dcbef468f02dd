# app/query/retry.py

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from app.clients.portal import ApiError, NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 30.0) -> float:
    """1 s, 2 s, 4 s, 8 s ... capped at max_delay. `attempt` starts at 0."""
    return min(base_delay * (2 ** attempt), max_delay)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget per error class. `failure_count` is the number of failures so far."""
    rate_limited: int = 0
    server_error: int = 0
    network: int = 0
    base_delay: float = 1.0
    max_delay: float = 30.0

    def should_retry(self, failure_count: int, error: BaseException) -> bool:
        if isinstance(error, NetworkError):
            return failure_count <= self.network
        if isinstance(error, ApiError):
            if error.is_rate_limited:
                return failure_count <= self.rate_limited
            if error.is_server_error:
                return failure_count <= self.server_error
        # Other 4xx (401 included) and programming errors are final
        return False

    def delay_for(self, attempt: int, error: BaseException) -> float:
        if isinstance(error, ApiError) and error.is_rate_limited:
            hint = error.retry_after
            if hint is not None:
                return min(hint, self.max_delay)
        return backoff_delay(attempt, self.base_delay, self.max_delay)


class QueryRetryPolicy(RetryPolicy):
    def __init__(self, base_delay: float = 1.0, max_delay: float = 30.0):
        super().__init__(rate_limited=3, server_error=3, network=2, base_delay=base_delay, max_delay=max_delay)


class MutationRetryPolicy(RetryPolicy):
    def __init__(self, base_delay: float = 1.0, max_delay: float = 30.0):
        super().__init__(rate_limited=2, server_error=1, network=0, base_delay=base_delay, max_delay=max_delay)


NO_RETRY = RetryPolicy()


async def run_with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    description: str = "request",
) -> T:
    failure_count = 0
    while True:
        try:
            return await fn()
        except (ApiError, NetworkError) as e:
            failure_count += 1
            if not policy.should_retry(failure_count, e):
                raise
            delay = policy.delay_for(failure_count - 1, e)
            logger.info(f"Retrying {description} in {delay:.2f}s after failure #{failure_count}: {e}")
            await sleep(delay)
