"""
app/api/endpoints/expenses.py
──────────────────────────────
Business expenses.

Routes
------
GET    /api/expenses                 Expenses, newest first, optionally by category.
POST   /api/expenses                 Record an expense.
GET    /api/expenses/{id}            One expense.
DELETE /api/expenses/{id}            Remove an expense.
GET    /api/expenses/{id}/payments   Payments against an expense, newest first.
POST   /api/expenses/{id}/payments   Record a payment and refresh the balance.
GET    /api/expenses/{id}/notes      Notes on an expense, newest first.
POST   /api/expenses/{id}/notes      Attach a note.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from supabase import Client

from app.api.dependencies import get_db
from app.api.ledger import fetch_row, insert_note, list_children, record_payment
from app.api.responses import cache_list
from schemas.expenses import (
    ExpenseCategory,
    ExpenseCreate,
    ExpenseNoteOut,
    ExpenseOut,
    ExpensePaymentOut,
)
from schemas.ledger import NoteCreate, PaymentCreate, payment_status_for

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[ExpenseOut], summary="List expenses")
def list_expenses(
    response: Response,
    category: Optional[ExpenseCategory] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    db: Client = Depends(get_db),
) -> List[ExpenseOut]:
    query = db.table("expenses").select("*")
    if category:
        query = query.eq("category", category)
    res = query.order("date", desc=True).limit(limit).execute()
    cache_list(response)
    return res.data or []


@router.post("", response_model=ExpenseOut, status_code=201, summary="Record an expense")
def create_expense(body: ExpenseCreate, db: Client = Depends(get_db)) -> ExpenseOut:
    """Balance and payment status are derived from the two amounts."""
    if body.amount_paid > body.total_amount:
        raise HTTPException(status_code=400, detail="'amount_paid' cannot exceed 'total_amount'")

    record = body.model_dump(mode="json")
    record["balance"] = round(body.total_amount - body.amount_paid, 2)
    record["payment_status"] = payment_status_for(body.total_amount, body.amount_paid)

    res = db.table("expenses").insert(record).execute()
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to create expense")
    logger.info("Recorded expense %s (%.2f)", body.item_name, body.total_amount)
    return res.data[0]


@router.get("/{expense_id}", response_model=ExpenseOut, summary="Get an expense")
def get_expense(expense_id: str, db: Client = Depends(get_db)) -> ExpenseOut:
    return fetch_row(db, "expenses", expense_id, "Expense")


@router.delete("/{expense_id}", status_code=204, summary="Delete an expense")
def delete_expense(expense_id: str, db: Client = Depends(get_db)) -> Response:
    res = db.table("expenses").delete().eq("id", expense_id).execute()
    if not res.data:
        raise HTTPException(status_code=404, detail=f"Expense '{expense_id}' not found")
    logger.info("Deleted expense %s", expense_id)
    return Response(status_code=204)


@router.get(
    "/{expense_id}/payments",
    response_model=List[ExpensePaymentOut],
    summary="List expense payments",
)
def list_payments(expense_id: str, db: Client = Depends(get_db)) -> List[ExpensePaymentOut]:
    return list_children(db, "expense_payments", "expense_id", expense_id, "date")


@router.post(
    "/{expense_id}/payments",
    response_model=ExpenseOut,
    status_code=201,
    summary="Record an expense payment",
)
def add_payment(expense_id: str, body: PaymentCreate, db: Client = Depends(get_db)) -> ExpenseOut:
    expense = fetch_row(db, "expenses", expense_id, "Expense")
    return record_payment(
        db,
        parent_table="expenses",
        payment_table="expense_payments",
        parent_key="expense_id",
        parent={**expense, "id": expense_id},
        body=body,
        label="expense",
    )


@router.get(
    "/{expense_id}/notes",
    response_model=List[ExpenseNoteOut],
    summary="List expense notes",
)
def list_notes(expense_id: str, db: Client = Depends(get_db)) -> List[ExpenseNoteOut]:
    return list_children(db, "expense_notes", "expense_id", expense_id, "created_at")


@router.post(
    "/{expense_id}/notes",
    response_model=ExpenseNoteOut,
    status_code=201,
    summary="Add an expense note",
)
def add_note(expense_id: str, body: NoteCreate, db: Client = Depends(get_db)) -> ExpenseNoteOut:
    fetch_row(db, "expenses", expense_id, "Expense")
    return insert_note(db, "expense_notes", {"expense_id": expense_id}, body)
