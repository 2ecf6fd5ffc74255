"""
data_client/fetch_cache.py
──────────────────────────
Stale-while-revalidate fetch cache.

One :class:`FetchCache` instance owns every cache entry for the lifetime of
the object that created it (an app, a test, a worker).  There is no
module-level cache: callers pass the instance explicitly.

Entry points that touch entries
-------------------------------
- :meth:`FetchCache.fetch`               — mount-time read (dedup + staleness policy).
- :meth:`FetchCache.revalidate`          — force a refetch of one key.
- :meth:`FetchCache.revalidate_matching` — force a refetch of many keys.
- :meth:`FetchCache.mutate`              — write data locally without a request.

Concurrent requests for the same key share one in-flight task, so N
callers asking for a fresh key produce exactly one fetcher call.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[Any]]
Listener = Callable[["CacheEntry"], None]


@dataclass(frozen=True)
class FetchConfig:
    """
    Per-hook revalidation policy.

    Attributes:
        revalidate_on_focus: Refetch when :meth:`FetchCache.focus` fires.
        deduping_interval:   Seconds an entry counts as fresh.
        revalidate_if_stale: Refetch on mount when cached data is older
                             than ``deduping_interval``.
        keep_previous_data:  Keep showing the previous key's data while a
                             new key loads.
    """

    revalidate_on_focus: bool = False
    deduping_interval: float = 60 * 60
    revalidate_if_stale: bool = False
    keep_previous_data: bool = True


DEFAULT_CONFIG = FetchConfig()
ANALYTICS_CONFIG = FetchConfig(deduping_interval=60 * 60)
LIST_CONFIG = FetchConfig(deduping_interval=30 * 60)
DETAIL_CONFIG = FetchConfig(deduping_interval=15 * 60)
DROPDOWN_CONFIG = FetchConfig(deduping_interval=60 * 60)


@dataclass
class CacheEntry:
    """
    Cached state for one key.

    ``fetched_at`` is the monotonic time of the last *successful* fetch and
    stays ``None`` until one succeeds.  ``error`` holds the exception from
    the most recent failed attempt; a later success clears it.
    """

    key: str
    data: Any = None
    error: Optional[BaseException] = None
    fetched_at: Optional[float] = None
    in_flight: bool = False

    @property
    def has_data(self) -> bool:
        return self.fetched_at is not None


@dataclass(eq=False)
class _Subscription:
    listener: Optional[Listener]
    config: FetchConfig


class FetchCache:
    """
    Process-lifetime store of :class:`CacheEntry` objects keyed by fetch key.

    Args:
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._fetchers: Dict[str, Fetcher] = {}
        self._inflight: Dict[str, "asyncio.Task[CacheEntry]"] = {}
        self._subscriptions: Dict[str, List[_Subscription]] = {}
        self.request_count = 0

    # ── inspection ────────────────────────────────────────────────────────

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> List[str]:
        return list(self._entries)

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def is_stale(self, key: str, config: FetchConfig = DEFAULT_CONFIG) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.fetched_at is None:
            return True
        return self._clock() - entry.fetched_at >= config.deduping_interval

    # ── registration ──────────────────────────────────────────────────────

    def register(self, key: str, fetcher: Fetcher) -> CacheEntry:
        """Record how ``key`` is fetched and make sure an entry exists."""
        self._fetchers[key] = fetcher
        return self._entries.setdefault(key, CacheEntry(key=key))

    def subscribe(
        self,
        key: str,
        listener: Optional[Listener] = None,
        config: FetchConfig = DEFAULT_CONFIG,
    ) -> Callable[[], None]:
        """
        Attach a consumer to ``key``.

        Returns:
            A callable that detaches the consumer.  Detaching the last
            consumer leaves the entry in place.
        """
        subscription = _Subscription(listener=listener, config=config)
        self._subscriptions.setdefault(key, []).append(subscription)

        def unsubscribe() -> None:
            subs = self._subscriptions.get(key, [])
            if subscription in subs:
                subs.remove(subscription)

        return unsubscribe

    def subscriber_count(self, key: str) -> int:
        return len(self._subscriptions.get(key, []))

    # ── reads and revalidation ────────────────────────────────────────────

    async def fetch(
        self, key: str, fetcher: Fetcher, config: FetchConfig = DEFAULT_CONFIG
    ) -> CacheEntry:
        """
        Return the entry for ``key``, requesting it only when needed.

        A request is issued when the key has never loaded successfully, or
        when ``config.revalidate_if_stale`` is set and the data is older
        than ``config.deduping_interval``.  An in-flight request for the same
        key is joined instead of duplicated.
        """
        entry = self.register(key, fetcher)
        if key in self._inflight:
            return await asyncio.shield(self._inflight[key])
        if not entry.has_data:
            return await self._start(key)
        if config.revalidate_if_stale and self.is_stale(key, config):
            return await self._start(key)
        return entry

    async def revalidate(self, key: str) -> Optional[CacheEntry]:
        """
        Refetch ``key`` regardless of freshness.

        Returns ``None`` when nothing ever registered a fetcher for the key.
        """
        if key not in self._fetchers:
            logger.debug("Skipping revalidation of unregistered key %s", key)
            return None
        if key in self._inflight:
            return await asyncio.shield(self._inflight[key])
        return await self._start(key)

    async def revalidate_matching(
        self,
        predicate: Callable[[str], bool],
        exclude: Iterable[str] = (),
    ) -> List[str]:
        """
        Refetch every registered key for which ``predicate`` is true.

        Args:
            predicate: Key filter.
            exclude:   Keys to skip even if they match.

        Returns:
            The keys that were revalidated, in registration order.
        """
        skipped = set(exclude)
        keys = [k for k in self._fetchers if k not in skipped and predicate(k)]
        if keys:
            await asyncio.gather(*(self.revalidate(k) for k in keys))
        return keys

    async def focus(self) -> List[str]:
        """Revalidate keys that have at least one focus-sensitive subscriber."""
        keys = [
            key
            for key, subs in self._subscriptions.items()
            if any(s.config.revalidate_on_focus for s in subs)
        ]
        if keys:
            await asyncio.gather(*(self.revalidate(k) for k in keys))
        return keys

    def mutate(self, key: str, data: Any) -> CacheEntry:
        """Replace the cached data for ``key`` without issuing a request."""
        entry = self._entries.setdefault(key, CacheEntry(key=key))
        entry.data = data
        entry.error = None
        entry.fetched_at = self._clock()
        self._notify(entry)
        return entry

    # ── internals ─────────────────────────────────────────────────────────

    async def _start(self, key: str) -> CacheEntry:
        task = asyncio.ensure_future(self._run(key))
        self._inflight[key] = task
        self._entries[key].in_flight = True
        return await asyncio.shield(task)

    async def _run(self, key: str) -> CacheEntry:
        entry = self._entries[key]
        fetcher = self._fetchers[key]
        self.request_count += 1
        try:
            data = await fetcher(key)
        except Exception as exc:
            entry.error = exc
            logger.warning("Fetch failed for %s: %s", key, exc)
        else:
            entry.data = data
            entry.error = None
            entry.fetched_at = self._clock()
        finally:
            entry.in_flight = False
            self._inflight.pop(key, None)
        self._notify(entry)
        return entry

    def _notify(self, entry: CacheEntry) -> None:
        for subscription in list(self._subscriptions.get(entry.key, [])):
            if subscription.listener is not None:
                subscription.listener(replace(entry))
