"""
app/api/endpoints/notifications.py
───────────────────────────────────
Per-user notifications.

Routes
------
GET   /api/notifications            Notifications of the ``X-User-Id`` caller.
PATCH /api/notifications/{id}/read  Mark one notification as read.

Anonymous callers get an empty list rather than an error.  Responses carry
a private Cache-Control header and a weak ETag; a matching
``If-None-Match`` short-circuits to 304.
"""

import hashlib
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response
from fastapi.responses import JSONResponse
from supabase import Client

from app.api.dependencies import get_db, get_user_id
from app.api.responses import PRIVATE_CACHE_CONTROL
from schemas.accounts import NotificationOut, NotificationsPage

logger = logging.getLogger(__name__)
router = APIRouter()


def _with_timestamp(row: Dict[str, Any]) -> Dict[str, Any]:
    return {**row, "timestamp": row.get("timestamp") or row.get("created_at")}


def _etag(payload: Any) -> str:
    digest = hashlib.sha1(json.dumps(payload, sort_keys=True, default=str).encode())
    return f'W/"{digest.hexdigest()}"'


def _etag_matches(if_none_match: Optional[str], etag: str) -> bool:
    """Weak comparison of ``etag`` against an ``If-None-Match`` header value."""
    if not if_none_match:
        return False
    candidates = [tag.strip() for tag in if_none_match.split(",")]
    if "*" in candidates:
        return True
    opaque = etag.removeprefix("W/")
    return any(tag.removeprefix("W/") == opaque for tag in candidates)


@router.get("", response_model=NotificationsPage, summary="List notifications")
def list_notifications(
    user_id: Optional[str] = Depends(get_user_id),
    if_none_match: Optional[str] = Header(default=None),
    db: Client = Depends(get_db),
) -> Response:
    if not user_id:
        return JSONResponse(
            {"notifications": []},
            headers={"Cache-Control": PRIVATE_CACHE_CONTROL},
        )

    res = (
        db.table("notifications")
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    payload = NotificationsPage(
        notifications=[_with_timestamp(r) for r in res.data or []]
    ).model_dump(mode="json")

    etag = _etag(payload)
    headers = {"Cache-Control": PRIVATE_CACHE_CONTROL, "ETag": etag}
    if _etag_matches(if_none_match, etag):
        return Response(status_code=304, headers=headers)
    return JSONResponse(payload, headers=headers)


@router.patch("/{notification_id}/read", response_model=NotificationOut, summary="Mark as read")
def mark_read(
    notification_id: str,
    user_id: Optional[str] = Depends(get_user_id),
    db: Client = Depends(get_db),
) -> NotificationOut:
    """
    Raises:
        HTTPException 401: No ``X-User-Id`` header.
        HTTPException 404: Notification missing or owned by someone else.
    """
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    res = (
        db.table("notifications")
        .update({"is_read": True})
        .eq("id", notification_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not res.data:
        raise HTTPException(
            status_code=404, detail=f"Notification '{notification_id}' not found"
        )
    return _with_timestamp(res.data[0])
