"""
app/api/endpoints/categories.py
────────────────────────────────
Product categories, served as dropdown options.

Routes
------
GET  /api/categories   All categories as ``{value, label}``, sorted by name.
POST /api/categories   Create a category from the dropdown's "add" entry.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from supabase import Client

from app.api.dependencies import get_db
from app.api.responses import cache_list
from schemas.catalog import CategoryCreate, DropdownOption, to_options

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[DropdownOption], summary="List categories")
def list_categories(response: Response, db: Client = Depends(get_db)) -> list[DropdownOption]:
    """
    Return every category as a dropdown option, ordered by name.

    Returns:
        ``[{"value": id, "label": name}, ...]``
    """
    res = db.table("categories").select("id, name").order("name").execute()
    cache_list(response)
    return to_options(res.data or [])


@router.post(
    "",
    response_model=DropdownOption,
    status_code=201,
    summary="Create a category",
)
def create_category(body: CategoryCreate, db: Client = Depends(get_db)) -> DropdownOption:
    """
    Insert a new category and return it as an option.

    Raises:
        HTTPException 500: Insert returned no row.
    """
    res = db.table("categories").insert({"name": body.name}).execute()
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to create category")
    row = res.data[0]
    logger.info("Created category %s (id=%s)", body.name, row["id"])
    return DropdownOption(value=str(row["id"]), label=row["name"])
