"""
tests/conftest.py
──────────────────
Shared pytest fixtures for the backend test suite.

Fixtures
--------
app_client
    ``httpx.AsyncClient`` wired to the FastAPI app with a mocked Supabase
    client so tests never hit the real database.

mock_db
    ``MagicMock`` standing in for the Supabase client, pre-configured with
    sensible defaults so individual tests can override only what they need.

make_query
    Factory for fluent query-builder mocks: every filter/modifier returns
    the same mock and ``.execute()`` yields the given rows (or raises).

use_tables
    Route ``mock_db.table(name)`` to per-table query mocks.

Usage
-----
    async def test_health(app_client):
        resp = await app_client.get("/")
        assert resp.status_code == 200
"""

import os
from typing import AsyncGenerator, Callable, Dict, Optional
from unittest.mock import MagicMock

# Settings require these; set before the app module is imported.
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from postgrest.exceptions import APIError

from app.api.dependencies import get_db
from app.main import app

BUILDER_METHODS = (
    "select", "insert", "update", "delete", "upsert",
    "eq", "neq", "in_", "gte", "lte", "lt", "gt", "ilike", "or_",
    "order", "limit", "range", "single",
)


def fluent_query(
    data: Optional[list] = None,
    count: Optional[int] = None,
    error: Optional[Exception] = None,
) -> MagicMock:
    query = MagicMock()
    for name in BUILDER_METHODS:
        getattr(query, name).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data if data is not None else [], count=count)
    return query


def api_error(message: str = "boom") -> APIError:
    return APIError({"message": message, "code": "500", "hint": None, "details": None})


# ── Mock Supabase client ──────────────────────────────────────────────────────


@pytest.fixture
def mock_db() -> MagicMock:
    """
    Return a MagicMock that mimics the Supabase client's fluent query builder.

    By default every table answers ``.execute()`` with ``MagicMock(data=[])``.
    Override per table with ``use_tables``.
    """
    client = MagicMock()
    client.table.return_value = fluent_query([])
    return client


@pytest.fixture
def db_error() -> APIError:
    return api_error()


@pytest.fixture
def make_query() -> Callable[..., MagicMock]:
    return fluent_query


@pytest.fixture
def use_tables(mock_db: MagicMock) -> Callable[[Dict[str, MagicMock]], None]:
    """
    Example::

        use_tables({"categories": make_query([{"id": "a", "name": "Banners"}])})
    """

    def _wire(tables: Dict[str, MagicMock]) -> None:
        default = fluent_query([])
        mock_db.table.side_effect = lambda name: tables.get(name, default)

    return _wire


# ── Test client ───────────────────────────────────────────────────────────────


@pytest.fixture
async def app_client(mock_db: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTPX client with Supabase dependency overridden by ``mock_db``.

    Startup lifespan is skipped to avoid real DB connections in tests.
    """
    app.dependency_overrides[get_db] = lambda: mock_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ── Synchronous test client (for non-async tests) ─────────────────────────────


@pytest.fixture
def sync_client(mock_db: MagicMock) -> TestClient:
    """
    Synchronous ``TestClient`` for simpler, non-async tests.

    Uses the same ``mock_db`` override as ``app_client``.
    """
    app.dependency_overrides[get_db] = lambda: mock_db
    client = TestClient(app, raise_server_exceptions=True)
    yield client
    app.dependency_overrides.clear()
