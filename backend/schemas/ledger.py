"""
schemas/ledger.py
─────────────────
Payments and notes shared by orders, expenses and material purchases.

  POST …/{id}/payments  ← ``PaymentCreate``
  POST …/{id}/notes     ← ``NoteCreate``

Each parent resource subclasses ``PaymentRecord`` / ``NoteRecord`` to add
its own foreign-key field.
"""

from datetime import date as Date
from typing import Literal, Optional

from pydantic import BaseModel, Field

PaymentStatus = Literal["unpaid", "partially_paid", "paid"]
PaymentMethod = Literal["cash", "bank_transfer", "mobile_payment", "cheque"]
NoteType = Literal["info", "follow_up", "urgent", "internal"]


def payment_status_for(total: float, paid: float) -> str:
    """Derive the payment status from totals."""
    if paid <= 0:
        return "unpaid"
    if paid < total:
        return "partially_paid"
    return "paid"


class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod = "cash"
    date: Optional[Date] = None
    created_by: Optional[str] = None


class PaymentRecord(BaseModel):
    id: str
    amount: float
    payment_method: Optional[str] = None
    date: Optional[str] = None


class NoteCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)
    type: NoteType = "info"
    created_by: Optional[str] = None


class NoteRecord(BaseModel):
    id: str
    text: str
    type: str = "info"
    created_by: Optional[str] = None
    created_at: Optional[str] = None
