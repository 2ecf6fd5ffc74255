"""
app/api/ledger.py
─────────────────
Payment and note bookkeeping shared by the order, expense and
material-purchase endpoints.

Every payable record carries ``total_amount``, ``amount_paid``, ``balance``
and ``payment_status``.  Its payments live in a child table keyed by the
parent id, and after each new payment ``amount_paid`` is summed from that
table again rather than incremented.
"""

import logging
from datetime import date as Date
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from schemas.ledger import NoteCreate, PaymentCreate, payment_status_for

logger = logging.getLogger(__name__)


def fetch_row(db: Client, table: str, row_id: str, label: str) -> Dict[str, Any]:
    """
    Raises:
        HTTPException 404: No row with that id.
    """
    res = db.table(table).select("*").eq("id", row_id).limit(1).execute()
    if not res.data:
        raise HTTPException(status_code=404, detail=f"{label} '{row_id}' not found")
    return res.data[0]


def list_children(
    db: Client, table: str, parent_key: str, parent_id: str, order_by: str
) -> List[Dict[str, Any]]:
    res = (
        db.table(table)
        .select("*")
        .eq(parent_key, parent_id)
        .order(order_by, desc=True)
        .execute()
    )
    return res.data or []


def paid_total(db: Client, payment_table: str, parent_key: str, parent_id: str) -> float:
    history = db.table(payment_table).select("amount").eq(parent_key, parent_id).execute()
    return round(sum(float(p.get("amount") or 0) for p in history.data or []), 2)


def settle(
    db: Client,
    table: str,
    row_id: str,
    total: float,
    paid: float,
    label: str,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Write ``amount_paid``, ``balance`` and ``payment_status`` for one row.

    Args:
        extra: Additional columns to write in the same update, e.g. a
               recomputed ``total_amount``.

    Raises:
        HTTPException 500: The update matched no row.
    """
    values = {
        **(extra or {}),
        "amount_paid": paid,
        "balance": round(total - paid, 2),
        "payment_status": payment_status_for(total, paid),
    }
    res = db.table(table).update(values).eq("id", row_id).execute()
    if not res.data:
        raise HTTPException(status_code=500, detail=f"Failed to update {label} totals")
    return res.data[0]


def record_payment(
    db: Client,
    *,
    parent_table: str,
    payment_table: str,
    parent_key: str,
    parent: Dict[str, Any],
    body: PaymentCreate,
    label: str,
) -> Dict[str, Any]:
    """
    Insert one payment and refresh the parent's totals from the full
    payment history.

    Args:
        parent: The parent row as loaded by :func:`fetch_row`.
        label:  Lower-case resource name used in logs and error messages.

    Returns:
        The updated parent row.
    """
    parent_id = parent["id"]
    payment = {
        parent_key: parent_id,
        "amount": body.amount,
        "payment_method": body.payment_method,
        "date": (body.date or Date.today()).isoformat(),
    }
    if body.created_by:
        payment["created_by"] = body.created_by
    db.table(payment_table).insert(payment).execute()

    paid = paid_total(db, payment_table, parent_key, parent_id)
    total = float(parent.get("total_amount") or 0)
    updated = settle(db, parent_table, parent_id, total, paid, label)
    logger.info(
        "Payment of %.2f on %s %s (paid=%.2f/%.2f)", body.amount, label, parent_id, paid, total
    )
    return updated


def insert_note(
    db: Client, table: str, link: Dict[str, Any], body: NoteCreate
) -> Dict[str, Any]:
    """
    Args:
        link: Columns tying the note to its parent, e.g. ``{"expense_id": id}``.

    Raises:
        HTTPException 500: The insert returned no row.
    """
    res = (
        db.table(table)
        .insert({**link, "text": body.text, "type": body.type, "created_by": body.created_by})
        .execute()
    )
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to add note")
    return res.data[0]
