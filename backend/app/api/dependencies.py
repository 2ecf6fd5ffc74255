"""
app/api/dependencies.py
───────────────────────
FastAPI dependency functions shared across all endpoints.

Usage
-----
    from app.api.dependencies import get_db

    @router.get("/foo")
    def my_route(db = Depends(get_db)):
        ...
"""

from typing import Optional

from fastapi import Header
from supabase import Client

from core.database import get_supabase_client


def get_db() -> Client:
    """
    FastAPI dependency that returns the Supabase client singleton.

    Inject via ``Depends(get_db)`` in any route handler.
    """
    return get_supabase_client()


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    Caller identity forwarded by the frontend in ``X-User-Id``.

    Session handling belongs to Supabase Auth; the API only scopes
    per-user queries with it.
    """
    return x_user_id or None
