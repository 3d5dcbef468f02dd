# app/query/strategies.py

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence

MINUTE = 60.0


class CacheTier(str, Enum):
    STATIC = "static"
    SEMI_DYNAMIC = "semi_dynamic"
    FREQUENT = "frequent"
    REAL_TIME = "real_time"


@dataclass(frozen=True)
class CachePolicy:
    """Seconds a cached value stays fresh, and seconds an unused entry is kept."""
    stale_time: float
    gc_time: float
    refetch_on_window_focus: bool = False


TIER_POLICIES: Dict[CacheTier, CachePolicy] = {
    CacheTier.STATIC: CachePolicy(stale_time=30 * MINUTE, gc_time=60 * MINUTE),
    CacheTier.SEMI_DYNAMIC: CachePolicy(stale_time=5 * MINUTE, gc_time=10 * MINUTE),
    CacheTier.FREQUENT: CachePolicy(stale_time=1 * MINUTE, gc_time=3 * MINUTE, refetch_on_window_focus=True),
    CacheTier.REAL_TIME: CachePolicy(stale_time=30.0, gc_time=60.0),
}

DEFAULT_POLICY = CachePolicy(stale_time=5 * MINUTE, gc_time=10 * MINUTE)

# Semi-dynamic resources differ in how long they stay fresh
RESOURCE_POLICIES: Dict[str, CachePolicy] = {
    "products": TIER_POLICIES[CacheTier.STATIC],
    "categories": TIER_POLICIES[CacheTier.STATIC],
    "clients": CachePolicy(stale_time=5 * MINUTE, gc_time=10 * MINUTE),
    "profile": CachePolicy(stale_time=5 * MINUTE, gc_time=15 * MINUTE),
    "vendors": CachePolicy(stale_time=10 * MINUTE, gc_time=20 * MINUTE),
    "templates": CachePolicy(stale_time=10 * MINUTE, gc_time=20 * MINUTE),
    "orders": TIER_POLICIES[CacheTier.FREQUENT],
    "modifications": TIER_POLICIES[CacheTier.FREQUENT],
    "order-modifications": TIER_POLICIES[CacheTier.FREQUENT],
    "notifications": TIER_POLICIES[CacheTier.REAL_TIME],
    "unread-count": TIER_POLICIES[CacheTier.REAL_TIME],
}


def policy_for_tier(tier: CacheTier) -> CachePolicy:
    return TIER_POLICIES[CacheTier(tier)]


def _segments(key: Sequence[Any]):
    for part in key:
        for segment in str(part).split("/"):
            if segment:
                yield segment


def policy_for_key(key: Sequence[Any]) -> CachePolicy:
    """
    The most specific resource named in the key wins:
    /api/orders/5/modifications -> modifications, /api/client/notifications/unread-count -> unread-count.
    """
    for segment in reversed(list(_segments(key))):
        policy = RESOURCE_POLICIES.get(segment)
        if policy is not None:
            return policy
    return DEFAULT_POLICY
