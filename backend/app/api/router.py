"""
app/api/router.py
─────────────────
Aggregates every endpoint router under the ``/api`` prefix set in
``app/main.py``.
"""

from fastapi import APIRouter

from app.api.endpoints import (
    categories,
    clients,
    debug,
    expenses,
    items,
    material_purchases,
    not_found,
    notifications,
    orders,
    storage,
    tasks,
    users,
)

api_router = APIRouter()

api_router.include_router(categories.router, prefix="/categories", tags=["catalog"])
api_router.include_router(items.router, prefix="/items", tags=["catalog"])
api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(expenses.router, prefix="/expenses", tags=["expenses"])
api_router.include_router(
    material_purchases.router, prefix="/material-purchases", tags=["materials"]
)
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
api_router.include_router(debug.router, prefix="/debug", tags=["debug"])
api_router.include_router(not_found.router)
