"""
schemas/materials.py
────────────────────
Raw-material purchases from suppliers:

  GET    /api/material-purchases                → ``MaterialPurchasesPage``
  POST   /api/material-purchases                ← ``MaterialPurchaseCreate`` → ``MaterialPurchaseOut``
  GET    /api/material-purchases/{id}           → ``MaterialPurchaseDetail``
  GET    /api/material-purchases/{id}/payments  → ``List[MaterialPaymentOut]``
  GET    /api/material-purchases/{id}/notes     → ``List[MaterialNoteOut]``
"""

from datetime import date as Date
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from schemas.ledger import NoteRecord, PaymentRecord


class MaterialPaymentOut(PaymentRecord):
    purchase_id: str


class MaterialNoteOut(NoteRecord):
    purchase_id: str


class MaterialPurchaseOut(BaseModel):
    id: str
    purchase_number: Optional[str] = None
    supplier_name: str
    material_name: Optional[str] = None
    date: Optional[str] = None
    quantity: float = 0.0
    unit: Optional[str] = None
    unit_price: float = 0.0
    total_amount: float = 0.0
    amount_paid: float = 0.0
    balance: float = 0.0
    payment_status: str = "unpaid"
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None


class MaterialPurchaseDetail(MaterialPurchaseOut):
    payments: List[MaterialPaymentOut] = []
    purchase_notes: List[MaterialNoteOut] = []
    partial: bool = False


class MaterialPurchasesPage(BaseModel):
    purchases: List[MaterialPurchaseOut]
    total_count: int


class MaterialPurchaseCreate(BaseModel):
    supplier_name: str = Field(..., min_length=1, max_length=200)
    material_name: str = Field(..., min_length=1, max_length=200)
    date: Date
    quantity: float = Field(..., gt=0)
    unit: Optional[str] = None
    unit_price: Optional[float] = Field(default=None, ge=0)
    total_amount: float = Field(..., gt=0)
    amount_paid: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None
    created_by: Optional[str] = None

    @model_validator(mode="after")
    def fill_unit_price(self) -> "MaterialPurchaseCreate":
        if self.amount_paid > self.total_amount:
            raise ValueError("'amount_paid' cannot exceed 'total_amount'.")
        if self.unit_price is None:
            self.unit_price = round(self.total_amount / self.quantity, 2)
        return self
