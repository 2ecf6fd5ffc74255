"""
app/api/endpoints/material_purchases.py
────────────────────────────────────────
Raw-material purchases, with the payments and notes attached to each.

Routes
------
GET    /api/material-purchases                 Filtered, paginated purchases.
POST   /api/material-purchases                 Record a purchase.
GET    /api/material-purchases/{id}            Purchase with payments and notes.
DELETE /api/material-purchases/{id}            Remove a purchase.
GET    /api/material-purchases/{id}/payments   Payments, newest first.
POST   /api/material-purchases/{id}/payments   Record a payment and refresh the balance.
GET    /api/material-purchases/{id}/notes      Notes, newest first.
POST   /api/material-purchases/{id}/notes      Attach a note.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date as Date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from postgrest.exceptions import APIError
from supabase import Client

from app.api.dependencies import get_db
from app.api.ledger import fetch_row, insert_note, list_children, record_payment
from app.api.responses import cache_list
from data_client.batch import batch_fetch, run_query
from schemas.ledger import NoteCreate, PaymentCreate, PaymentStatus, payment_status_for
from schemas.materials import (
    MaterialNoteOut,
    MaterialPaymentOut,
    MaterialPurchaseCreate,
    MaterialPurchaseDetail,
    MaterialPurchaseOut,
    MaterialPurchasesPage,
)

logger = logging.getLogger(__name__)
router = APIRouter()

_executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix="materials")


@router.get("", response_model=MaterialPurchasesPage, summary="List material purchases")
def list_purchases(
    response: Response,
    supplier: Optional[str] = Query(default=None, max_length=100),
    start_date: Optional[Date] = Query(default=None),
    end_date: Optional[Date] = Query(default=None),
    payment_status: Optional[PaymentStatus] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Client = Depends(get_db),
) -> MaterialPurchasesPage:
    query = db.table("material_purchases").select("*", count="exact")
    if supplier:
        query = query.ilike("supplier_name", f"%{supplier.strip()}%")
    if start_date:
        query = query.gte("date", start_date.isoformat())
    if end_date:
        query = query.lte("date", end_date.isoformat())
    if payment_status:
        query = query.eq("payment_status", payment_status)
    res = query.order("date", desc=True).range(offset, offset + limit - 1).execute()

    rows = res.data or []
    cache_list(response)
    return MaterialPurchasesPage(
        purchases=rows,
        total_count=res.count if res.count is not None else len(rows),
    )


@router.post(
    "",
    response_model=MaterialPurchaseOut,
    status_code=201,
    summary="Record a material purchase",
)
def create_purchase(
    body: MaterialPurchaseCreate, db: Client = Depends(get_db)
) -> MaterialPurchaseOut:
    """
    Insert the purchase and, when something was paid up front, its first
    payment.  A failed payment insert deletes the purchase again.
    """
    paid = round(body.amount_paid, 2)
    record = body.model_dump(mode="json")
    record["balance"] = round(body.total_amount - paid, 2)
    record["payment_status"] = payment_status_for(body.total_amount, paid)

    res = db.table("material_purchases").insert(record).execute()
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to create material purchase")
    purchase = res.data[0]

    if paid > 0:
        try:
            db.table("material_payments").insert(
                {
                    "purchase_id": purchase["id"],
                    "amount": paid,
                    "payment_method": "cash",
                    "date": body.date.isoformat(),
                }
            ).execute()
        except APIError:
            logger.error("Rolling back material purchase %s", purchase["id"])
            db.table("material_purchases").delete().eq("id", purchase["id"]).execute()
            raise

    logger.info(
        "Recorded material purchase %s from %s (%.2f)",
        purchase["id"],
        body.supplier_name,
        body.total_amount,
    )
    return purchase


@router.get(
    "/{purchase_id}",
    response_model=MaterialPurchaseDetail,
    summary="Get a material purchase",
)
async def get_purchase(purchase_id: str, db: Client = Depends(get_db)) -> MaterialPurchaseDetail:
    purchase_rows, payments, notes = await batch_fetch(
        [
            (
                "material_purchase",
                lambda: run_query(
                    db.table("material_purchases").select("*").eq("id", purchase_id).limit(1),
                    _executor,
                ),
            ),
            (
                "material_payments",
                lambda: run_query(
                    db.table("material_payments")
                    .select("*")
                    .eq("purchase_id", purchase_id)
                    .order("date", desc=True),
                    _executor,
                ),
            ),
            (
                "material_purchase_notes",
                lambda: run_query(
                    db.table("material_purchase_notes")
                    .select("*")
                    .eq("purchase_id", purchase_id)
                    .order("created_at", desc=True),
                    _executor,
                ),
            ),
        ]
    )

    if purchase_rows is None:
        raise HTTPException(status_code=500, detail="Failed to fetch material purchase")
    if not purchase_rows:
        raise HTTPException(
            status_code=404, detail=f"Material purchase '{purchase_id}' not found"
        )

    partial = payments is None or notes is None
    if partial:
        logger.warning("Material purchase %s returned with missing related data", purchase_id)

    purchase = {
        k: v for k, v in purchase_rows[0].items() if k not in ("payments", "purchase_notes")
    }
    return MaterialPurchaseDetail(
        **purchase,
        payments=payments or [],
        purchase_notes=notes or [],
        partial=partial,
    )


@router.delete("/{purchase_id}", status_code=204, summary="Delete a material purchase")
def delete_purchase(purchase_id: str, db: Client = Depends(get_db)) -> Response:
    res = db.table("material_purchases").delete().eq("id", purchase_id).execute()
    if not res.data:
        raise HTTPException(
            status_code=404, detail=f"Material purchase '{purchase_id}' not found"
        )
    logger.info("Deleted material purchase %s", purchase_id)
    return Response(status_code=204)


@router.get(
    "/{purchase_id}/payments",
    response_model=List[MaterialPaymentOut],
    summary="List material purchase payments",
)
def list_payments(purchase_id: str, db: Client = Depends(get_db)) -> List[MaterialPaymentOut]:
    return list_children(db, "material_payments", "purchase_id", purchase_id, "date")


@router.post(
    "/{purchase_id}/payments",
    response_model=MaterialPurchaseOut,
    status_code=201,
    summary="Record a material purchase payment",
)
def add_payment(
    purchase_id: str, body: PaymentCreate, db: Client = Depends(get_db)
) -> MaterialPurchaseOut:
    purchase = fetch_row(db, "material_purchases", purchase_id, "Material purchase")
    return record_payment(
        db,
        parent_table="material_purchases",
        payment_table="material_payments",
        parent_key="purchase_id",
        parent={**purchase, "id": purchase_id},
        body=body,
        label="material purchase",
    )


@router.get(
    "/{purchase_id}/notes",
    response_model=List[MaterialNoteOut],
    summary="List material purchase notes",
)
def list_notes(purchase_id: str, db: Client = Depends(get_db)) -> List[MaterialNoteOut]:
    return list_children(db, "material_purchase_notes", "purchase_id", purchase_id, "created_at")


@router.post(
    "/{purchase_id}/notes",
    response_model=MaterialNoteOut,
    status_code=201,
    summary="Add a material purchase note",
)
def add_note(
    purchase_id: str, body: NoteCreate, db: Client = Depends(get_db)
) -> MaterialNoteOut:
    fetch_row(db, "material_purchases", purchase_id, "Material purchase")
    return insert_note(db, "material_purchase_notes", {"purchase_id": purchase_id}, body)
