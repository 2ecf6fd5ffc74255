"""
app/api/endpoints/items.py
───────────────────────────
Catalogue items, always scoped to a category.

Routes
------
GET  /api/items?category_id=...   Items of one category as dropdown options.
POST /api/items                   Create an item under a category.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from supabase import Client

from app.api.dependencies import get_db
from app.api.responses import cache_list
from schemas.catalog import DropdownOption, ItemCreate, to_options

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[DropdownOption], summary="List items of a category")
def list_items(
    response: Response,
    category_id: str = Query(..., min_length=1, description="Parent category id."),
    db: Client = Depends(get_db),
) -> list[DropdownOption]:
    res = (
        db.table("items")
        .select("id, name")
        .eq("category_id", category_id)
        .order("name")
        .execute()
    )
    cache_list(response)
    return to_options(res.data or [])


@router.post("", response_model=DropdownOption, status_code=201, summary="Create an item")
def create_item(body: ItemCreate, db: Client = Depends(get_db)) -> DropdownOption:
    """
    Insert an item under ``body.category_id``.

    Raises:
        HTTPException 404: Category does not exist.
    """
    category = (
        db.table("categories").select("id").eq("id", body.category_id).limit(1).execute()
    )
    if not category.data:
        raise HTTPException(
            status_code=404, detail=f"Category '{body.category_id}' not found"
        )

    res = (
        db.table("items")
        .insert({"name": body.name, "category_id": body.category_id})
        .execute()
    )
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to create item")
    row = res.data[0]
    logger.info("Created item %s in category %s", body.name, body.category_id)
    return DropdownOption(value=str(row["id"]), label=row["name"])
