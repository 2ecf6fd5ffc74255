"""
tests/test_fetch_cache.py
──────────────────────────
Deduplication, staleness and failure handling of ``FetchCache``.
"""

import asyncio

from data_client.fetch_cache import FetchCache, FetchConfig


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class CountingFetcher:
    """Fetcher that records calls and can be told to fail."""

    def __init__(self, delay: float = 0.01) -> None:
        self.calls = []
        self.delay = delay
        self.fail_with = None

    async def __call__(self, key):
        self.calls.append(key)
        await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        return {"key": key, "n": len(self.calls)}


async def test_concurrent_fetches_share_one_request():
    cache = FetchCache()
    fetcher = CountingFetcher()

    entries = await asyncio.gather(*(cache.fetch("/api/orders", fetcher) for _ in range(10)))

    assert fetcher.calls == ["/api/orders"]
    assert cache.request_count == 1
    assert all(e.data == {"key": "/api/orders", "n": 1} for e in entries)


async def test_fresh_entry_is_served_from_cache():
    cache = FetchCache()
    fetcher = CountingFetcher()
    await cache.fetch("/api/clients", fetcher)
    await cache.fetch("/api/clients", fetcher)
    assert len(fetcher.calls) == 1


async def test_stale_entry_refetched_only_when_configured():
    clock = FakeClock()
    cache = FetchCache(clock=clock)
    fetcher = CountingFetcher()
    lazy = FetchConfig(deduping_interval=60)
    eager = FetchConfig(deduping_interval=60, revalidate_if_stale=True)

    await cache.fetch("/api/tasks", fetcher, lazy)
    clock.now += 120
    assert cache.is_stale("/api/tasks", lazy)

    await cache.fetch("/api/tasks", fetcher, lazy)
    assert len(fetcher.calls) == 1

    await cache.fetch("/api/tasks", fetcher, eager)
    assert len(fetcher.calls) == 2
    assert not cache.is_stale("/api/tasks", eager)


async def test_failure_keeps_previous_data():
    cache = FetchCache()
    fetcher = CountingFetcher()
    await cache.fetch("/api/orders/42", fetcher)

    fetcher.fail_with = RuntimeError("network down")
    entry = await cache.revalidate("/api/orders/42")

    assert isinstance(entry.error, RuntimeError)
    assert entry.data == {"key": "/api/orders/42", "n": 1}
    assert not entry.in_flight


async def test_failure_without_data_is_retried_on_next_fetch():
    cache = FetchCache()
    fetcher = CountingFetcher()
    fetcher.fail_with = RuntimeError("boom")
    entry = await cache.fetch("/api/expenses", fetcher)
    assert entry.error is not None and not entry.has_data

    fetcher.fail_with = None
    entry = await cache.fetch("/api/expenses", fetcher)
    assert entry.error is None
    assert entry.has_data


async def test_revalidate_unregistered_key_is_noop():
    cache = FetchCache()
    assert await cache.revalidate("/api/orders/1") is None
    assert cache.request_count == 0


async def test_revalidate_matching_honours_exclude():
    cache = FetchCache()
    fetcher = CountingFetcher(delay=0)
    for key in ("/api/orders", "/api/orders/1", "/api/clients"):
        await cache.fetch(key, fetcher)
    fetcher.calls.clear()

    keys = await cache.revalidate_matching(lambda k: "/api/orders" in k, exclude=["/api/orders/1"])

    assert keys == ["/api/orders"]
    assert fetcher.calls == ["/api/orders"]


async def test_focus_revalidates_only_focus_subscribers():
    cache = FetchCache()
    fetcher = CountingFetcher(delay=0)
    await cache.fetch("/api/notifications", fetcher)
    await cache.fetch("/api/orders", fetcher)
    cache.subscribe("/api/notifications", config=FetchConfig(revalidate_on_focus=True))
    cache.subscribe("/api/orders")
    fetcher.calls.clear()

    assert await cache.focus() == ["/api/notifications"]
    assert fetcher.calls == ["/api/notifications"]


async def test_mutate_notifies_subscribers_and_unsubscribe():
    cache = FetchCache()
    seen = []
    unsubscribe = cache.subscribe("/api/categories", seen.append)

    cache.mutate("/api/categories", [{"value": "a", "label": "Banners"}])
    unsubscribe()
    cache.mutate("/api/categories", [])

    assert len(seen) == 1
    assert seen[0].data == [{"value": "a", "label": "Banners"}]
    assert seen[0] is not cache.get("/api/categories")
    assert cache.subscriber_count("/api/categories") == 0
