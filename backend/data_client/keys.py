"""
data_client/keys.py
───────────────────
Canonical fetch-key construction.

Every cached query is identified by a string of the form::

    /api/<resource>[/<segment>...][?name=value&...]

Parameters are sorted by name, ``None`` values are dropped and list values
are repeated in the order given, so two call sites describing the same
query always produce the same key.  Nothing else in the data client builds
keys by hand.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Tuple
from urllib.parse import urlencode

API_PREFIX = "/api"


class Resource(str, Enum):
    """API resources; values are the endpoint path segments."""

    ORDERS = "orders"
    CLIENTS = "clients"
    CATEGORIES = "categories"
    ITEMS = "items"
    EXPENSES = "expenses"
    TASKS = "tasks"
    NOTIFICATIONS = "notifications"
    USERS = "users"

    @property
    def endpoint(self) -> str:
        """Path prefix shared by every key of this resource, e.g. ``/api/orders``."""
        return f"{API_PREFIX}/{self.value}"


def _flatten_params(params: Mapping[str, Any]) -> Tuple[Tuple[str, str], ...]:
    pairs = []
    for name in sorted(params):
        value = params[name]
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((name, _render(v)) for v in value)
        else:
            pairs.append((name, _render(value)))
    return tuple(pairs)


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass(frozen=True)
class ResourceKey:
    """
    Typed descriptor of a cached query.

    Attributes:
        resource: Which API resource the query targets.
        segments: Extra path segments (an id, ``"analytics"``…).
        params:   Query-string pairs, already canonicalised.
    """

    resource: Resource
    segments: Tuple[str, ...] = ()
    params: Tuple[Tuple[str, str], ...] = field(default=())

    @classmethod
    def of(cls, resource: Resource, *segments: Any, **params: Any) -> "ResourceKey":
        return cls(
            resource=Resource(resource),
            segments=tuple(str(s) for s in segments if s not in (None, "")),
            params=_flatten_params(params),
        )

    @property
    def path(self) -> str:
        return "/".join((self.resource.endpoint, *self.segments))

    def __str__(self) -> str:
        if not self.params:
            return self.path
        return f"{self.path}?{urlencode(self.params)}"


def build_key(resource: Resource, *segments: Any, **params: Any) -> str:
    """
    Return the canonical key string for a query.

    Example:
        >>> build_key(Resource.ORDERS, "42")
        '/api/orders/42'
        >>> build_key(Resource.ORDERS, status=["pending", "draft"], limit=50)
        '/api/orders?limit=50&status=pending&status=draft'
    """
    return str(ResourceKey.of(resource, *segments, **params))


def keys_for_resource(keys: Iterable[str], resource: Resource) -> list:
    """Filter ``keys`` down to those whose string contains the resource prefix."""
    prefix = resource.endpoint
    return [key for key in keys if prefix in key]
