# tests/query/test_cache_strategies.py
from app.query.keys import (
    NOTIFICATIONS_KEY, ORDERS_KEY, PRODUCTS_KEY, UNREAD_COUNT_KEY, order_history_key, order_modifications_key,
)
from app.query.strategies import (
    DEFAULT_POLICY, TIER_POLICIES, CacheTier, policy_for_key, policy_for_tier,
)


def test_tier_timings():
    assert policy_for_tier(CacheTier.STATIC).stale_time == 30 * 60
    assert policy_for_tier(CacheTier.STATIC).gc_time == 60 * 60
    assert policy_for_tier(CacheTier.SEMI_DYNAMIC).stale_time == 5 * 60
    assert policy_for_tier(CacheTier.FREQUENT).stale_time == 60
    assert policy_for_tier(CacheTier.FREQUENT).refetch_on_window_focus is True
    assert policy_for_tier(CacheTier.REAL_TIME).stale_time == 30
    assert policy_for_tier(CacheTier.REAL_TIME).gc_time == 60


def test_tier_lookup_accepts_plain_strings():
    assert policy_for_tier("frequent") == TIER_POLICIES[CacheTier.FREQUENT]


def test_resource_keys_map_to_tiers():
    assert policy_for_key(PRODUCTS_KEY) == TIER_POLICIES[CacheTier.STATIC]
    assert policy_for_key(ORDERS_KEY) == TIER_POLICIES[CacheTier.FREQUENT]
    assert policy_for_key(NOTIFICATIONS_KEY) == TIER_POLICIES[CacheTier.REAL_TIME]
    assert policy_for_key(UNREAD_COUNT_KEY) == TIER_POLICIES[CacheTier.REAL_TIME]


def test_most_specific_segment_wins():
    assert policy_for_key(order_modifications_key(5)) == TIER_POLICIES[CacheTier.FREQUENT]
    # "history" is not a known resource, so the enclosing "orders" decides
    assert policy_for_key(order_history_key(5)) == TIER_POLICIES[CacheTier.FREQUENT]
    assert policy_for_key(("/api/admin/vendors",)).stale_time == 10 * 60


def test_unknown_keys_use_default_policy():
    assert policy_for_key(("/api/something-else",)) == DEFAULT_POLICY
    assert DEFAULT_POLICY.stale_time == 5 * 60
    assert DEFAULT_POLICY.gc_time == 10 * 60
