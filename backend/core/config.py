"""
core/config.py
──────────────
Centralised application settings via ``pydantic-settings``.

All configuration is driven by environment variables (or a ``.env`` file
in the ``backend/`` directory).  ``pydantic-settings`` validates types at
startup, so missing required values fail fast with a clear error message.

Usage
-----
    from core.config import get_settings

    settings = get_settings()
    print(settings.SUPABASE_URL)
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the backend/ directory so relative .env paths work from any cwd.
_BACKEND_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables / ``.env`` file.

    Attributes:
        APP_TITLE:               Human-readable API name shown in OpenAPI docs.
        APP_VERSION:             Semantic version string.
        ENVIRONMENT:             ``development`` or ``production``.
        DEBUG:                   Enable verbose logging.
        LOG_LEVEL:               Root log level name.
        SUPABASE_URL:            Supabase project URL (required).
        SUPABASE_KEY:            Supabase anon or service-role key (required).
        FRONTEND_URL:            Optional deployed frontend origin for CORS.
        DISABLED_ROUTE_PREFIXES: Development-only routes hidden in production.
        API_BASE_URL:            Base URL the data client talks to.
    """

    model_config = SettingsConfigDict(
        env_file=str(_BACKEND_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── API metadata ──────────────────────────────────────────────────────
    APP_TITLE: str = "Ivan Prints API"
    APP_VERSION: str = "0.3.0"
    APP_DESCRIPTION: str = (
        "Backend for the Ivan Prints business manager. "
        "Orders, clients, items, expenses, tasks and notifications."
    )

    # ── Runtime ───────────────────────────────────────────────────────────
    ENVIRONMENT: Literal["development", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Supabase (required) ───────────────────────────────────────────────
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_KEY: str = Field(..., description="Supabase anon or service-role key")

    # ── CORS ──────────────────────────────────────────────────────────────
    FRONTEND_URL: str = ""

    # ── Routing ───────────────────────────────────────────────────────────
    DISABLED_ROUTE_PREFIXES: List[str] = ["/api/debug", "/api/test-db", "/api/seed"]

    # ── Storage ───────────────────────────────────────────────────────────
    STORAGE_FILE_SIZE_LIMIT: int = 10 * 1024 * 1024

    # ── Data client ───────────────────────────────────────────────────────
    API_BASE_URL: str = "http://localhost:8000"
    API_TIMEOUT_SECONDS: float = 20.0

    @property
    def IS_PRODUCTION(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """
        Build the full CORS allow-list.

        Hard-coded dev origins plus the optional ``FRONTEND_URL`` env var.
        """
        origins: List[str] = [
            "http://localhost:3000",   # Next.js dev server
            "http://127.0.0.1:3000",
        ]
        if self.FRONTEND_URL:
            origins.append(self.FRONTEND_URL)
        return origins

    @field_validator("SUPABASE_URL")
    @classmethod
    def _must_not_be_empty(cls, v: str) -> str:
        """Raise if a required URL field is blank."""
        if not v:
            raise ValueError("SUPABASE_URL must not be empty")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalise_level(cls, v: str) -> str:
        return v.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return a cached ``Settings`` singleton.

    The instance is created (and the ``.env`` file parsed) only once per
    process lifetime, courtesy of ``functools.lru_cache``.
    """
    return Settings()
