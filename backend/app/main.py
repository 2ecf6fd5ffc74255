"""
app/main.py
────────────
FastAPI application factory.

All business logic lives in ``app/api/endpoints/``.
This file is intentionally slim — it wires together logging, middleware,
exception handlers, routers and lifecycle events only.

API Layout
----------
GET  /                            Health check  (no auth)
GET  /api/categories              Category dropdown options
GET  /api/items?category_id=...   Item dropdown options
GET  /api/clients                 Client dropdown options
GET  /api/orders                  Filtered, paginated orders
GET  /api/orders/metrics          Order counters
GET  /api/orders/analytics        Order analytics
GET  /api/orders/{id}             Order with items, payments, notes
GET  /api/expenses                Expenses
GET  /api/material-purchases      Material purchases
GET  /api/tasks                   Tasks
GET  /api/notifications           Notifications of the caller
GET  /api/users/{id}              User profile
GET  /api/storage/init            Create missing storage buckets
GET  /api/debug/...               Diagnostics (development only)

OpenAPI docs
------------
- Swagger UI:  http://localhost:8000/docs
- ReDoc:       http://localhost:8000/redoc
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.router import api_router
from app.errors import register_exception_handlers
from app.middleware import DisabledRouteMiddleware
from core.config import Settings, get_settings
from core.database import get_supabase_client
from core.logging_config import configure_logging

logger = logging.getLogger(__name__)


# ── Lifespan ──────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application startup and shutdown logic.

    Startup:  Warm up the Supabase client singleton so the first request
              doesn't pay the connection overhead.
    Shutdown: Nothing to close (HTTP client managed by supabase-py).
    """
    settings = get_settings()
    logger.info(
        "Starting %s v%s (environment=%s, debug=%s)",
        settings.APP_TITLE,
        settings.APP_VERSION,
        settings.ENVIRONMENT,
        settings.DEBUG,
    )
    try:
        get_supabase_client()  # raises early if env vars are wrong
        logger.info("Supabase connection verified")
    except Exception as exc:
        logger.error("Supabase initialisation failed: %s", exc)
        raise

    yield

    logger.info("Shutting down %s", settings.APP_TITLE)


# ── App factory ───────────────────────────────────────────────────────────────


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Overrides ``get_settings()``; tests pass a production
                  configuration this way.
    """
    settings = settings or get_settings()
    configure_logging("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── Middleware ────────────────────────────────────────────────────────────

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        DisabledRouteMiddleware,
        prefixes=settings.DISABLED_ROUTE_PREFIXES,
        enabled=settings.IS_PRODUCTION,
    )

    register_exception_handlers(app)

    # ── Routers ───────────────────────────────────────────────────────────────

    app.include_router(api_router, prefix="/api")

    # ── Root health-check ─────────────────────────────────────────────────────

    @app.get("/", tags=["health"], summary="Health check")
    def health_check() -> dict:
        """
        Lightweight liveness probe.

        Returns:
            Status, current API version and environment.
        """
        return {
            "status": "ok",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

    return app


app = create_app()
