"""
schemas/expenses.py
───────────────────
Business expenses (rent, utilities, materials…) with their payments and
notes.
"""

from datetime import date as Date
from typing import Literal, Optional

from pydantic import BaseModel, Field

from schemas.ledger import NoteRecord, PaymentRecord

ExpenseCategory = Literal["fixed", "variable"]


class ExpenseOut(BaseModel):
    id: str
    item_name: str
    category: str
    description: Optional[str] = None
    date: Optional[str] = None
    total_amount: float = 0.0
    amount_paid: float = 0.0
    balance: float = 0.0
    payment_status: str = "unpaid"
    is_recurring: bool = False
    created_at: Optional[str] = None


class ExpenseCreate(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=200)
    category: ExpenseCategory = "variable"
    description: Optional[str] = None
    date: Date
    total_amount: float = Field(..., gt=0)
    amount_paid: float = Field(default=0.0, ge=0)
    is_recurring: bool = False


class ExpensePaymentOut(PaymentRecord):
    expense_id: str


class ExpenseNoteOut(NoteRecord):
    expense_id: str
