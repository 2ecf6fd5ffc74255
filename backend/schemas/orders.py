"""
schemas/orders.py
─────────────────
Pydantic schemas for the order endpoints:

  GET    /api/orders              → ``OrdersPage``
  GET    /api/orders/metrics      → ``OrderMetrics``
  GET    /api/orders/analytics    → ``OrderAnalytics``
  GET    /api/orders/{id}         → ``OrderDetail``
  POST   /api/orders              ← ``OrderCreate``  → ``OrderOut``
  PATCH  /api/orders/{id}         ← ``OrderUpdate``  → ``OrderOut``
  POST   /api/orders/{id}/payments← ``PaymentCreate`` → ``OrderOut``
  POST   /api/orders/{id}/notes   ← ``NoteCreate``    → ``NoteOut``
  GET    /api/orders/{id}/items    → ``List[OrderItemOut]``
  POST   /api/orders/{id}/items   ← ``OrderItemIn``   → ``OrderItemOut``

Payment and note bodies come from ``schemas.ledger``.
"""

from datetime import date as Date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from schemas.ledger import NoteRecord, PaymentRecord

OrderStatus = Literal[
    "draft", "pending", "in_progress", "paused", "completed", "delivered", "cancelled"
]

PENDING_STATUSES = ("pending", "in_progress", "draft")
COMPLETED_STATUSES = ("completed", "delivered")
UNPAID_STATUSES = ("unpaid", "partially_paid")


# ── order lines ───────────────────────────────────────────────────────────────


class OrderItemIn(BaseModel):
    item_id: str
    category_id: Optional[str] = None
    size: Optional[str] = None
    quantity: int = Field(..., ge=1)
    unit_price: float = Field(..., ge=0)


class OrderItemOut(BaseModel):
    id: str
    order_id: str
    item_id: Optional[str] = None
    category_id: Optional[str] = None
    size: Optional[str] = None
    quantity: int
    unit_price: float
    total_amount: float


class PaymentOut(PaymentRecord):
    order_id: str


class NoteOut(NoteRecord):
    order_id: str


# ── orders ────────────────────────────────────────────────────────────────────


class OrderOut(BaseModel):
    id: str
    order_number: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_type: Optional[str] = "regular"
    date: Optional[str] = None
    status: str
    payment_status: str
    total_amount: float = 0.0
    amount_paid: float = 0.0
    balance: float = 0.0
    delivery_date: Optional[str] = None
    is_delivered: Optional[bool] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OrderDetail(OrderOut):
    items: List[OrderItemOut] = []
    payments: List[PaymentOut] = []
    notes: List[NoteOut] = []
    partial: bool = Field(
        default=False,
        description="True when a related collection could not be loaded.",
    )


class OrdersPage(BaseModel):
    orders: List[OrderOut]
    total_count: int
    page_count: int


class OrderCreate(BaseModel):
    client_id: str
    client_name: Optional[str] = None
    client_type: Literal["regular", "contract"] = "regular"
    date: Date
    status: OrderStatus = "pending"
    delivery_date: Optional[Date] = None
    items: List[OrderItemIn] = Field(..., min_length=1)
    amount_paid: float = Field(default=0.0, ge=0)
    created_by: Optional[str] = None

    @property
    def total_amount(self) -> float:
        return round(sum(i.quantity * i.unit_price for i in self.items), 2)

    @model_validator(mode="after")
    def check_paid_not_above_total(self) -> "OrderCreate":
        if self.amount_paid > self.total_amount:
            raise ValueError("'amount_paid' cannot exceed the order total.")
        return self


class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    date: Optional[Date] = None
    delivery_date: Optional[Date] = None
    is_delivered: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly set by the caller, JSON-ready."""
        return self.model_dump(mode="json", exclude_unset=True)


# ── metrics / analytics ──────────────────────────────────────────────────────


class OrderMetrics(BaseModel):
    total_orders: int
    total_revenue: float
    pending_orders: int
    active_clients: int
    completed_orders: int
    unpaid_orders: int
    unpaid_total: float


class ClientDebt(BaseModel):
    id: str
    name: str
    debt: float
    order_count: int


class MonthlyRevenue(BaseModel):
    month: str  # YYYY-MM
    revenue: float
    orders: int


class OrderAnalytics(OrderMetrics):
    avg_order_value: float
    completion_rate: float
    clients_with_debt: List[ClientDebt]
    revenue_by_month: List[MonthlyRevenue]
