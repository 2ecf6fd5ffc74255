"""
app/api/endpoints/debug.py
───────────────────────────
Development diagnostics.  Hidden in production by ``DisabledRouteMiddleware``.

Routes
------
GET /api/debug/health   Database round-trip check.
GET /api/debug/config   Non-secret runtime settings.
"""

import logging
import time

from fastapi import APIRouter, Depends
from postgrest.exceptions import APIError
from supabase import Client

from app.api.dependencies import get_db
from core.config import get_settings

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", summary="Database health check")
def db_health(db: Client = Depends(get_db)) -> dict:
    started = time.perf_counter()
    try:
        db.table("categories").select("id").limit(1).execute()
    except APIError as exc:
        logger.warning("Health check query failed: %s", exc.message)
        return {"status": "error", "database": "unreachable", "error": exc.message}
    elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
    return {"status": "ok", "database": "reachable", "latency_ms": elapsed_ms}


@router.get("/config", summary="Runtime configuration")
def show_config() -> dict:
    settings = get_settings()
    return {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "log_level": settings.LOG_LEVEL,
        "version": settings.APP_VERSION,
        "cors_origins": settings.CORS_ORIGINS,
        "disabled_route_prefixes": settings.DISABLED_ROUTE_PREFIXES,
        "supabase_configured": bool(settings.SUPABASE_URL and settings.SUPABASE_KEY),
    }
