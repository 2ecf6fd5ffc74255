"""
app/api/endpoints/users.py
───────────────────────────
GET /api/users/{user_id} — a staff member's profile.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from supabase import Client

from app.api.dependencies import get_db
from schemas.accounts import ProfileOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{user_id}", response_model=ProfileOut, summary="Get a user profile")
def get_user(user_id: str, db: Client = Depends(get_db)) -> ProfileOut:
    """
    Raises:
        HTTPException 400: ``user_id`` is not a UUID.
        HTTPException 404: No profile for that id.
    """
    try:
        uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid user ID format")

    res = db.table("profiles").select("*").eq("id", user_id).limit(1).execute()
    if not res.data:
        raise HTTPException(status_code=404, detail="User not found")
    return res.data[0]
