"""
tests/test_app.py
──────────────────
Application wiring: health check, diagnostics, not-found route and the
production-only route blocking.
"""

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import get_db
from app.main import create_app
from app.middleware import DisabledRouteMiddleware
from core.config import Settings


async def test_health_check(app_client):
    resp = await app_client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_health_check_sync(sync_client):
    assert sync_client.get("/").json()["status"] == "ok"


@pytest.mark.parametrize("method", ["GET", "POST", "DELETE"])
async def test_not_found_route(app_client, method):
    resp = await app_client.request(method, "/api/not-found")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}


async def test_debug_routes_in_development(app_client):
    config = await app_client.get("/api/debug/config")
    health = await app_client.get("/api/debug/health")
    assert config.status_code == 200
    assert config.json()["environment"] == "development"
    assert health.json()["status"] == "ok"


async def test_debug_health_reports_database_error(app_client, use_tables, make_query, db_error):
    use_tables({"categories": make_query(error=db_error)})
    resp = await app_client.get("/api/debug/health")
    assert resp.json()["status"] == "error"


async def test_unknown_route_uses_error_shape(app_client):
    resp = await app_client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_unexpected_error_uses_error_shape(mock_db, caplog):
    mock_db.table.side_effect = RuntimeError("connection reset")
    app = create_app()
    app.dependency_overrides[get_db] = lambda: mock_db

    resp = TestClient(app, raise_server_exceptions=False).get("/api/categories")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "Unhandled error on GET /api/categories" in caplog.text


class TestProductionRouteBlocking:
    @pytest.fixture
    async def prod_client(self, mock_db):
        settings = Settings(
            ENVIRONMENT="production",
            SUPABASE_URL="https://example.supabase.co",
            SUPABASE_KEY="test-key",
        )
        prod_app = create_app(settings)
        prod_app.dependency_overrides[get_db] = lambda: mock_db
        async with AsyncClient(
            transport=ASGITransport(app=prod_app), base_url="http://test"
        ) as client:
            yield client

    @pytest.mark.parametrize(
        "path", ["/api/debug/health", "/api/debug/config", "/api/seed", "/api/test-db/x"]
    )
    async def test_disabled_prefixes_return_404(self, prod_client, path):
        resp = await prod_client.get(path)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Not found"}

    async def test_other_routes_still_served(self, prod_client):
        resp = await prod_client.get("/api/categories")
        assert resp.status_code == 200


class TestDisabledRouteMatching:
    def test_prefix_boundaries(self):
        mw = DisabledRouteMiddleware(app=None, prefixes=["/api/debug/"])
        assert mw.is_disabled("/api/debug")
        assert mw.is_disabled("/api/debug/health")
        assert not mw.is_disabled("/api/debugger")
        assert not mw.is_disabled("/api/orders")
