"""
data_client/api_client.py
─────────────────────────
Async HTTP client for the Ivan Prints API.

Reads (:meth:`ApiClient.get_json`) are meant to be used as fetch-cache
fetchers: the cache key *is* the request path.  Mutations publish an
invalidation signal for the touched resource once the server answers 2xx,
which is the only way signals enter the bus from application code.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from data_client.invalidation import InvalidationBus
from data_client.keys import Resource, build_key

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, url: str = "") -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.url = url


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for field in ("error", "message", "detail"):
            if body.get(field):
                return str(body[field])
    return response.reason_phrase


class ApiClient:
    """
    Thin wrapper around ``httpx.AsyncClient``.

    Args:
        base_url: API origin; ignored when ``http`` is supplied.
        bus:      Where mutation signals go.  ``None`` disables signalling.
        http:     Pre-built client (tests pass one with a mock transport).
        headers:  Default headers, e.g. ``{"X-User-Id": ...}``.
        timeout:  Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        bus: Optional[InvalidationBus] = None,
        http: Optional[httpx.AsyncClient] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 20.0,
    ) -> None:
        if http is None:
            if base_url is None:
                from core.config import get_settings

                settings = get_settings()
                base_url = settings.API_BASE_URL
                timeout = settings.API_TIMEOUT_SECONDS
            http = httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)
        self._http = http
        self._bus = bus

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── reads ─────────────────────────────────────────────────────────────

    async def get_json(self, key: str) -> Any:
        """GET ``key`` and return the decoded body; raises :class:`FetchError` on non-2xx."""
        return await self._request("GET", key)

    # ── mutations ─────────────────────────────────────────────────────────

    async def create(self, resource: Resource, payload: Dict[str, Any]) -> Any:
        body = await self._request("POST", build_key(resource), json=payload)
        self._signal(resource, None)
        return body

    async def update(self, resource: Resource, resource_id: str, payload: Dict[str, Any]) -> Any:
        body = await self._request("PATCH", build_key(resource, resource_id), json=payload)
        self._signal(resource, resource_id)
        return body

    async def delete(self, resource: Resource, resource_id: str) -> Any:
        body = await self._request("DELETE", build_key(resource, resource_id))
        self._signal(resource, resource_id)
        return body

    async def post_action(
        self,
        resource: Resource,
        resource_id: str,
        action: str,
        payload: Dict[str, Any],
    ) -> Any:
        """POST to a sub-resource, e.g. ``/api/orders/42/payments``."""
        body = await self._request("POST", build_key(resource, resource_id, action), json=payload)
        self._signal(resource, resource_id)
        return body

    # ── internals ─────────────────────────────────────────────────────────

    async def _request(self, method: str, url: str, json: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._http.request(method, url, json=json)
        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s failed with %d: %s", method, url, response.status_code, message)
            raise FetchError(response.status_code, message, url)
        if not response.content:
            return None
        return response.json()

    def _signal(self, resource: Resource, resource_id: Optional[str]) -> None:
        if self._bus is not None:
            self._bus.publish(resource, resource_id)
