"""
app/api/endpoints/storage.py
─────────────────────────────
GET /api/storage/init — make sure every Supabase Storage bucket the app
uploads to exists.

Buckets that already exist are left alone.  ``logos`` and ``invoices`` are
public (their URLs end up in printed documents); the rest are private.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException
from storage3.utils import StorageException
from supabase import Client

from app.api.dependencies import get_db
from core.config import get_settings
from schemas.accounts import StorageInitResponse

logger = logging.getLogger(__name__)
router = APIRouter()

# bucket name → public?
BUCKETS: Dict[str, bool] = {
    "orders": False,
    "profiles": False,
    "receipts": False,
    "materials": False,
    "invoices": True,
    "logos": True,
}


@router.get("/init", response_model=StorageInitResponse, summary="Initialise storage buckets")
def init_storage(db: Client = Depends(get_db)) -> StorageInitResponse:
    """
    Create any missing bucket.

    ``success`` is false when at least one bucket could not be created; the
    others are still attempted.

    Raises:
        HTTPException 500: The bucket list itself could not be read.
    """
    limit = get_settings().STORAGE_FILE_SIZE_LIMIT
    try:
        existing = {bucket.name for bucket in db.storage.list_buckets()}
    except StorageException as exc:
        logger.error("Could not list storage buckets: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to list storage buckets")

    result = StorageInitResponse(success=True)
    for name, public in BUCKETS.items():
        if name in existing:
            result.existing.append(name)
            continue
        try:
            db.storage.create_bucket(
                name, options={"public": public, "file_size_limit": limit}
            )
        except StorageException as exc:
            logger.error("Could not create storage bucket %s: %s", name, exc)
            result.failed.append(name)
            continue
        logger.info("Created storage bucket %s (public=%s)", name, public)
        result.created.append(name)

    result.success = not result.failed
    return result
