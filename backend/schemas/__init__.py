"""
Pydantic schemas for request/response serialization.

Separate from the data layer (``data_client``) and routes (HTTP layer).
"""

from schemas.accounts import NotificationOut, ProfileOut, StorageInitResponse
from schemas.catalog import DropdownOption, to_options
from schemas.clients import ClientCreate, ClientOut
from schemas.expenses import ExpenseCreate, ExpenseOut
from schemas.ledger import NoteCreate, PaymentCreate
from schemas.materials import MaterialPurchaseCreate, MaterialPurchaseOut
from schemas.orders import OrderAnalytics, OrderCreate, OrderDetail, OrderMetrics, OrderOut
from schemas.tasks import TaskCreate, TaskOut, TaskUpdate

__all__ = [
    "ClientCreate",
    "ClientOut",
    "DropdownOption",
    "ExpenseCreate",
    "ExpenseOut",
    "MaterialPurchaseCreate",
    "MaterialPurchaseOut",
    "NoteCreate",
    "NotificationOut",
    "OrderAnalytics",
    "OrderCreate",
    "OrderDetail",
    "OrderMetrics",
    "OrderOut",
    "PaymentCreate",
    "ProfileOut",
    "StorageInitResponse",
    "TaskCreate",
    "TaskOut",
    "TaskUpdate",
    "to_options",
]
