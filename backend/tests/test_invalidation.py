"""
tests/test_invalidation.py
───────────────────────────
Invalidation bus and coordinator.
"""

import asyncio

import pytest

from data_client.fetch_cache import FetchCache
from data_client.invalidation import (
    CacheInvalidationCoordinator,
    CoordinatorState,
    InvalidationBus,
)
from data_client.keys import Resource, build_key


class RecordingFetcher:
    def __init__(self):
        self.calls = []

    async def __call__(self, key):
        self.calls.append(key)
        return {"key": key}


@pytest.fixture
async def warmed():
    """Cache holding order list, detail, metrics and a client list."""
    cache = FetchCache()
    fetcher = RecordingFetcher()
    for key in (
        build_key(Resource.ORDERS, limit=100, offset=0),
        build_key(Resource.ORDERS, "42"),
        build_key(Resource.ORDERS, "7"),
        build_key(Resource.ORDERS, "metrics"),
        build_key(Resource.CLIENTS),
    ):
        await cache.fetch(key, fetcher)
    fetcher.calls.clear()
    return cache, fetcher


async def test_order_mutation_revalidates_target_then_resource(warmed):
    cache, fetcher = warmed
    bus = InvalidationBus()
    coordinator = CacheInvalidationCoordinator(cache, bus)

    bus.publish(Resource.ORDERS, "42")
    assert coordinator.state is CoordinatorState.SIGNALED

    keys = await coordinator.process_pending()

    assert keys[0] == "/api/orders/42"
    assert sorted(keys[1:]) == [
        "/api/orders/7",
        "/api/orders/metrics",
        "/api/orders?limit=100&offset=0",
    ]
    assert fetcher.calls.count("/api/orders/42") == 1
    assert "/api/clients" not in fetcher.calls
    assert coordinator.state is CoordinatorState.IDLE
    assert coordinator.last_signal is None


async def test_state_stays_idle_after_pass(warmed):
    cache, _ = warmed
    bus = InvalidationBus()
    coordinator = CacheInvalidationCoordinator(cache, bus)
    bus.publish(Resource.CLIENTS)

    await coordinator.process_pending()

    assert coordinator.state is CoordinatorState.IDLE
    assert coordinator.state is CoordinatorState.IDLE
    assert coordinator.last_signal is None


async def test_second_pass_without_signal_is_noop(warmed):
    cache, fetcher = warmed
    bus = InvalidationBus()
    coordinator = CacheInvalidationCoordinator(cache, bus)
    bus.publish(Resource.ORDERS, "42")
    await coordinator.process_pending()
    fetcher.calls.clear()
    before = coordinator.revalidation_count

    assert await coordinator.process_pending() == []
    assert fetcher.calls == []
    assert coordinator.revalidation_count == before


async def test_two_quick_mutations_both_processed(warmed):
    cache, fetcher = warmed
    bus = InvalidationBus()
    coordinator = CacheInvalidationCoordinator(cache, bus)

    bus.publish(Resource.ORDERS, "42")
    bus.publish(Resource.CLIENTS)
    assert bus.pending == 2

    await coordinator.process_pending()

    assert "/api/orders/42" in fetcher.calls
    assert "/api/clients" in fetcher.calls
    assert bus.pending == 0


async def test_unknown_target_key_is_skipped(warmed):
    cache, fetcher = warmed
    bus = InvalidationBus()
    coordinator = CacheInvalidationCoordinator(cache, bus)

    bus.publish(Resource.ORDERS, "999")
    keys = await coordinator.process_pending()

    assert "/api/orders/999" not in keys
    assert "/api/orders/999" not in fetcher.calls
    assert len(keys) == 4


def test_bus_accepts_one_consumer():
    bus = InvalidationBus()
    first = CacheInvalidationCoordinator(FetchCache(), bus)
    with pytest.raises(RuntimeError):
        CacheInvalidationCoordinator(FetchCache(), bus)

    first.close()
    CacheInvalidationCoordinator(FetchCache(), bus)


def test_empty_id_is_normalised():
    bus = InvalidationBus()
    signal = bus.publish(Resource.TASKS, "")
    assert signal.resource_id is None
    assert signal.target_key is None


async def test_background_consumer(warmed):
    cache, fetcher = warmed
    bus = InvalidationBus()
    coordinator = CacheInvalidationCoordinator(cache, bus)
    coordinator.start()

    bus.publish(Resource.CLIENTS)
    for _ in range(50):
        if "/api/clients" in fetcher.calls:
            break
        await asyncio.sleep(0.01)

    await coordinator.stop()
    assert fetcher.calls == ["/api/clients"]
    assert coordinator.state is CoordinatorState.IDLE
