"""
data_client/hooks.py
────────────────────
Query "hooks": per-consumer views onto :class:`~data_client.fetch_cache.FetchCache`.

A hook is created unmounted, mounted with ``await hook.mount()`` and then
read through ``data`` / ``is_loading`` / ``is_error``.  Failures never
raise out of a hook; they show up as ``is_error`` while ``data`` keeps its
last good value.

    cache = FetchCache()
    orders = use_orders(cache, client, status=["pending"])
    await orders.mount()
    if orders.is_error:
        ...
"""

import logging
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

from data_client.api_client import ApiClient
from data_client.batch import QueryResult, batch_fetch
from data_client.fetch_cache import (
    ANALYTICS_CONFIG,
    DEFAULT_CONFIG,
    DETAIL_CONFIG,
    DROPDOWN_CONFIG,
    LIST_CONFIG,
    CacheEntry,
    Fetcher,
    FetchCache,
    FetchConfig,
)
from data_client.keys import Resource, build_key

logger = logging.getLogger(__name__)


class QueryHook:
    """
    One consumer of one cache key.

    Args:
        cache:     Shared fetch cache.
        key:       Fetch key, or ``None`` to hold off fetching (conditional query).
        fetcher:   Coroutine function taking the key.
        config:    Revalidation policy.
        on_change: Called with the hook after every entry update.
    """

    def __init__(
        self,
        cache: FetchCache,
        key: Optional[str],
        fetcher: Fetcher,
        config: FetchConfig = DEFAULT_CONFIG,
        on_change: Optional[Callable[["QueryHook"], None]] = None,
    ) -> None:
        self._cache = cache
        self._key = key
        self._fetcher = fetcher
        self.config = config
        self._on_change = on_change
        self._previous_data: Any = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.mounted = False

    # ── state ─────────────────────────────────────────────────────────────

    @property
    def key(self) -> Optional[str]:
        return self._key

    @property
    def entry(self) -> Optional[CacheEntry]:
        if self._key is None:
            return None
        return self._cache.get(self._key)

    @property
    def data(self) -> Any:
        entry = self.entry
        if entry is not None and entry.has_data:
            return entry.data
        if self.config.keep_previous_data:
            return self._previous_data
        return None

    @property
    def error(self) -> Optional[BaseException]:
        entry = self.entry
        return entry.error if entry is not None else None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_loading(self) -> bool:
        """True until the first response (success or failure) for the current key."""
        if self._key is None:
            return False
        entry = self.entry
        if entry is None:
            return True
        if entry.has_data:
            return False
        return entry.in_flight or entry.error is None

    @property
    def is_validating(self) -> bool:
        entry = self.entry
        return bool(entry and entry.in_flight)

    # ── lifecycle ─────────────────────────────────────────────────────────

    async def mount(self) -> "QueryHook":
        self.mounted = True
        if self._key is not None:
            self._subscribe()
            await self._cache.fetch(self._key, self._fetcher, self.config)
        return self

    def unmount(self) -> None:
        """Detach from the cache; the entry itself stays cached."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.mounted = False

    async def refetch(self) -> Any:
        """Force a request for the current key and return the resulting data."""
        if self._key is None:
            return None
        self._cache.register(self._key, self._fetcher)
        await self._cache.revalidate(self._key)
        return self.data

    async def set_key(self, key: Optional[str]) -> "QueryHook":
        """Point the hook at a new key (e.g. after a filter change)."""
        if key == self._key:
            return self
        self._previous_data = self.data
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._key = key
        if self.mounted and key is not None:
            self._subscribe()
            await self._cache.fetch(key, self._fetcher, self.config)
        return self

    def _subscribe(self) -> None:
        self._unsubscribe = self._cache.subscribe(self._key, self._changed, self.config)

    def _changed(self, entry: CacheEntry) -> None:
        if self._on_change is not None:
            self._on_change(self)


# ── resource hooks ────────────────────────────────────────────────────────────


def use_query(
    cache: FetchCache,
    client: ApiClient,
    key: Optional[str],
    config: FetchConfig = DEFAULT_CONFIG,
) -> QueryHook:
    return QueryHook(cache, key, client.get_json, config)


def use_orders(
    cache: FetchCache,
    client: ApiClient,
    *,
    status: Optional[Sequence[str]] = None,
    payment_status: Optional[Sequence[str]] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
) -> QueryHook:
    key = build_key(
        Resource.ORDERS,
        status=list(status) if status else None,
        payment_status=list(payment_status) if payment_status else None,
        start_date=start_date,
        end_date=end_date,
        search=search or None,
        limit=limit,
        offset=offset,
    )
    return use_query(cache, client, key, LIST_CONFIG)


def use_order(cache: FetchCache, client: ApiClient, order_id: Optional[str]) -> QueryHook:
    key = build_key(Resource.ORDERS, order_id) if order_id else None
    return use_query(cache, client, key, DETAIL_CONFIG)


def use_order_metrics(
    cache: FetchCache,
    client: ApiClient,
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> QueryHook:
    key = build_key(Resource.ORDERS, "metrics", start_date=start_date, end_date=end_date)
    return use_query(cache, client, key, ANALYTICS_CONFIG)


def use_order_analytics(
    cache: FetchCache,
    client: ApiClient,
    *,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> QueryHook:
    key = build_key(Resource.ORDERS, "analytics", start_date=start_date, end_date=end_date)
    return use_query(cache, client, key, ANALYTICS_CONFIG)


def use_categories(cache: FetchCache, client: ApiClient) -> QueryHook:
    return use_query(cache, client, build_key(Resource.CATEGORIES), DROPDOWN_CONFIG)


def use_clients(cache: FetchCache, client: ApiClient) -> QueryHook:
    return use_query(cache, client, build_key(Resource.CLIENTS), DROPDOWN_CONFIG)


def use_items(cache: FetchCache, client: ApiClient, category_id: Optional[str]) -> QueryHook:
    # Items only make sense within a category; no category means no request.
    key = build_key(Resource.ITEMS, category_id=category_id) if category_id else None
    return use_query(cache, client, key, DROPDOWN_CONFIG)


def use_expenses(
    cache: FetchCache,
    client: ApiClient,
    *,
    category: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> QueryHook:
    key = build_key(Resource.EXPENSES, category=category, start_date=start_date, end_date=end_date)
    return use_query(cache, client, key, LIST_CONFIG)


def use_tasks(cache: FetchCache, client: ApiClient, *, status: Optional[str] = None) -> QueryHook:
    return use_query(cache, client, build_key(Resource.TASKS, status=status), LIST_CONFIG)


def use_notifications(cache: FetchCache, client: ApiClient) -> QueryHook:
    return use_query(
        cache,
        client,
        build_key(Resource.NOTIFICATIONS),
        FetchConfig(deduping_interval=60, revalidate_on_focus=True, revalidate_if_stale=True),
    )


# ── prefetching ───────────────────────────────────────────────────────────────


async def _cached_query(
    cache: FetchCache, key: str, fetcher: Fetcher, config: FetchConfig
) -> QueryResult:
    entry = await cache.fetch(key, fetcher, config)
    if entry.error is not None and not entry.has_data:
        return QueryResult(error=entry.error)
    return QueryResult(data=entry.data)


async def prefetch_dropdowns(cache: FetchCache, client: ApiClient) -> Dict[str, Optional[List[Dict[str, Any]]]]:
    """
    Warm the dropdown entries (categories, clients) in one batch.

    Returns:
        ``{"categories": [...] | None, "clients": [...] | None}``.
    """
    keys = {
        "categories": build_key(Resource.CATEGORIES),
        "clients": build_key(Resource.CLIENTS),
    }
    results = await batch_fetch(
        [
            (label, partial(_cached_query, cache, key, client.get_json, DROPDOWN_CONFIG))
            for label, key in keys.items()
        ]
    )
    loaded = dict(zip(keys, results))
    logger.debug("Prefetched dropdowns: %s", {k: v is not None for k, v in loaded.items()})
    return loaded
