"""
data_client — client-side data layer for the Ivan Prints API.

Public API
----------
    from data_client import (
        ApiClient, FetchCache, QueryHook, InvalidationBus,
        CacheInvalidationCoordinator, batch_fetch, build_key, Resource,
    )
"""

from data_client.api_client import ApiClient, FetchError
from data_client.batch import QueryResult, batch_fetch, run_query
from data_client.fetch_cache import CacheEntry, FetchCache, FetchConfig
from data_client.hooks import QueryHook, prefetch_dropdowns
from data_client.invalidation import (
    CacheInvalidationCoordinator,
    CoordinatorState,
    InvalidationBus,
    InvalidationSignal,
)
from data_client.keys import Resource, ResourceKey, build_key

__all__ = [
    "ApiClient",
    "CacheEntry",
    "CacheInvalidationCoordinator",
    "CoordinatorState",
    "FetchCache",
    "FetchConfig",
    "FetchError",
    "InvalidationBus",
    "InvalidationSignal",
    "QueryHook",
    "QueryResult",
    "Resource",
    "ResourceKey",
    "batch_fetch",
    "build_key",
    "prefetch_dropdowns",
    "run_query",
]
