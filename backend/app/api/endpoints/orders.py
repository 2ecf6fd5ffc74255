"""
app/api/endpoints/orders.py
────────────────────────────
Order endpoints.

Routes
------
GET    /api/orders                 Filtered, paginated order list.
GET    /api/orders/metrics         Dashboard counters over the filtered orders.
GET    /api/orders/analytics       Metrics plus debtors and monthly revenue.
GET    /api/orders/{id}            Order with items, payments and notes.
POST   /api/orders                 Create an order with its line items.
PATCH  /api/orders/{id}            Partial update.
DELETE /api/orders/{id}            Delete an order.
POST   /api/orders/{id}/payments   Record a payment and refresh the balance.
POST   /api/orders/{id}/notes      Attach a note.
GET    /api/orders/{id}/items      Line items of an order.
POST   /api/orders/{id}/items      Add a line item and refresh the order totals.

Route order matters: ``/metrics`` and ``/analytics`` are registered before
``/{order_id}`` so FastAPI does not read them as ids.

Error codes
-----------
400  Invalid request body or query parameters.
404  Order not found.
500  Database error.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import date as Date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from postgrest.exceptions import APIError
from supabase import Client

from analytics.orders import compute_order_analytics, compute_order_metrics
from app.api.dependencies import get_db
from app.api.ledger import (
    fetch_row,
    insert_note,
    list_children,
    paid_total,
    record_payment,
    settle,
)
from app.api.responses import cache_list
from data_client.batch import batch_fetch, run_query
from schemas.ledger import NoteCreate, PaymentCreate, payment_status_for
from schemas.orders import (
    NoteOut,
    OrderAnalytics,
    OrderCreate,
    OrderDetail,
    OrderItemIn,
    OrderItemOut,
    OrderMetrics,
    OrderOut,
    OrdersPage,
    OrderUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter()

# supabase-py is synchronous; the detail route fans its queries out here.
_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="orders")

ORDER_COLUMNS = (
    "id, order_number, client_id, client_name, client_type, date, status, "
    "payment_status, total_amount, amount_paid, balance, created_by, "
    "delivery_date, is_delivered, created_at, updated_at"
)
METRIC_COLUMNS = (
    "id, client_id, client_name, date, status, payment_status, "
    "total_amount, amount_paid, balance"
)


# ── Private helpers ───────────────────────────────────────────────────────────


def _shape_order(row: Dict[str, Any]) -> Dict[str, Any]:
    """Replace ``None`` amounts with ``0`` so the response model validates."""
    shaped = dict(row)
    for col in ("total_amount", "amount_paid", "balance"):
        if shaped.get(col) is None:
            shaped[col] = 0
    shaped.setdefault("payment_status", "unpaid")
    return shaped


def _shape_note(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "order_id": row.get("linked_item_id"),
        "text": row.get("text") or "",
        "type": row.get("type") or "info",
        "created_by": row.get("created_by"),
        "created_at": row.get("created_at"),
    }


def _ilike_pattern(term: str) -> str:
    """Quote a search term for use inside a PostgREST ``or=(...)`` filter."""
    escaped = term.replace("\\", "\\\\").replace('"', '\\"')
    return f'"%{escaped}%"'


def _line_record(order_id: str, line: OrderItemIn) -> Dict[str, Any]:
    return {
        "order_id": order_id,
        "item_id": line.item_id,
        "category_id": line.category_id,
        "size": line.size,
        "quantity": line.quantity,
        "unit_price": line.unit_price,
        "total_amount": round(line.quantity * line.unit_price, 2),
    }


def _apply_filters(
    query: Any,
    status: Optional[List[str]],
    payment_status: Optional[List[str]],
    start_date: Optional[Date],
    end_date: Optional[Date],
    search: Optional[str],
) -> Any:
    if status:
        query = query.in_("status", status)
    if payment_status:
        query = query.in_("payment_status", payment_status)
    if start_date:
        query = query.gte("date", start_date.isoformat())
    if end_date:
        query = query.lte("date", end_date.isoformat())
    if search:
        pattern = _ilike_pattern(search.strip())
        query = query.or_(f"order_number.ilike.{pattern},client_name.ilike.{pattern}")
    return query


def _fetch_filtered_rows(
    db: Client,
    status: Optional[List[str]],
    payment_status: Optional[List[str]],
    start_date: Optional[Date],
    end_date: Optional[Date],
) -> List[Dict[str, Any]]:
    query = db.table("orders").select(METRIC_COLUMNS)
    query = _apply_filters(query, status, payment_status, start_date, end_date, None)
    res = query.execute()
    return res.data or []


def _get_order_row(order_id: str, db: Client) -> Dict[str, Any]:
    return fetch_row(db, "orders", order_id, "Order")


# ── Collection routes ─────────────────────────────────────────────────────────


@router.get("", response_model=OrdersPage, summary="List orders")
def list_orders(
    response: Response,
    status: Optional[List[str]] = Query(default=None),
    payment_status: Optional[List[str]] = Query(default=None),
    start_date: Optional[Date] = Query(default=None),
    end_date: Optional[Date] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=100),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Client = Depends(get_db),
) -> OrdersPage:
    """
    Orders newest first, filtered by status, payment status, date range and a
    free-text search over order number and client name.

    ``page_count`` is derived from the exact row count and ``limit``.
    """
    query = db.table("orders").select(ORDER_COLUMNS, count="exact")
    query = _apply_filters(query, status, payment_status, start_date, end_date, search)
    res = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()

    rows = res.data or []
    total = res.count if res.count is not None else len(rows)
    logger.info("Listed %d of %d orders (offset=%d)", len(rows), total, offset)

    cache_list(response)
    return OrdersPage(
        orders=[_shape_order(r) for r in rows],
        total_count=total,
        page_count=math.ceil(total / limit) if total else 0,
    )


@router.get("/metrics", response_model=OrderMetrics, summary="Order metrics")
def order_metrics(
    response: Response,
    status: Optional[List[str]] = Query(default=None),
    payment_status: Optional[List[str]] = Query(default=None),
    start_date: Optional[Date] = Query(default=None),
    end_date: Optional[Date] = Query(default=None),
    db: Client = Depends(get_db),
) -> OrderMetrics:
    rows = _fetch_filtered_rows(db, status, payment_status, start_date, end_date)
    cache_list(response)
    return compute_order_metrics(rows)


@router.get("/analytics", response_model=OrderAnalytics, summary="Order analytics")
def order_analytics(
    response: Response,
    start_date: Optional[Date] = Query(default=None),
    end_date: Optional[Date] = Query(default=None),
    db: Client = Depends(get_db),
) -> OrderAnalytics:
    rows = _fetch_filtered_rows(db, None, None, start_date, end_date)
    cache_list(response)
    return compute_order_analytics(rows)


@router.post("", response_model=OrderOut, status_code=201, summary="Create an order")
def create_order(body: OrderCreate, db: Client = Depends(get_db)) -> OrderOut:
    """
    Insert the order, then its line items, then the initial payment if any.

    Totals, balance and payment status are computed here rather than
    trusted from the caller.  If the items or the initial payment cannot be
    written, the order row is deleted again and the error propagates.
    """
    total = body.total_amount
    paid = round(body.amount_paid, 2)
    record = {
        "client_id": body.client_id,
        "client_name": body.client_name,
        "client_type": body.client_type,
        "date": body.date.isoformat(),
        "status": body.status,
        "delivery_date": body.delivery_date.isoformat() if body.delivery_date else None,
        "total_amount": total,
        "amount_paid": paid,
        "balance": round(total - paid, 2),
        "payment_status": payment_status_for(total, paid),
        "created_by": body.created_by,
    }
    res = db.table("orders").insert(record).execute()
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to create order")
    order = res.data[0]

    try:
        db.table("order_items").insert(
            [_line_record(order["id"], line) for line in body.items]
        ).execute()

        if paid > 0:
            db.table("order_payments").insert(
                {
                    "order_id": order["id"],
                    "amount": paid,
                    "payment_method": "cash",
                    "date": body.date.isoformat(),
                }
            ).execute()
    except APIError:
        logger.error("Rolling back order %s after a failed child insert", order["id"])
        db.table("orders").delete().eq("id", order["id"]).execute()
        raise

    logger.info(
        "Created order %s: %d item(s), total=%.2f", order["id"], len(body.items), total
    )
    return _shape_order(order)


# ── Single-order routes ───────────────────────────────────────────────────────


@router.get("/{order_id}", response_model=OrderDetail, summary="Get an order")
async def get_order(order_id: str, db: Client = Depends(get_db)) -> OrderDetail:
    """
    Load the order and its three related collections concurrently.

    The order itself must load; a failed related collection is returned
    empty and the response is flagged ``partial``.
    """
    order_rows, items, payments, notes = await batch_fetch(
        [
            (
                "order",
                lambda: run_query(
                    db.table("orders").select("*").eq("id", order_id).limit(1), _executor
                ),
            ),
            (
                "order_items",
                lambda: run_query(
                    db.table("order_items").select("*").eq("order_id", order_id), _executor
                ),
            ),
            (
                "order_payments",
                lambda: run_query(
                    db.table("order_payments")
                    .select("*")
                    .eq("order_id", order_id)
                    .order("date", desc=True),
                    _executor,
                ),
            ),
            (
                "order_notes",
                lambda: run_query(
                    db.table("notes")
                    .select("*")
                    .eq("linked_item_id", order_id)
                    .eq("linked_item_type", "order")
                    .order("created_at", desc=True),
                    _executor,
                ),
            ),
        ]
    )

    if order_rows is None:
        raise HTTPException(status_code=500, detail="Failed to fetch order")
    if not order_rows:
        raise HTTPException(status_code=404, detail=f"Order '{order_id}' not found")

    partial = items is None or payments is None or notes is None
    if partial:
        logger.warning("Order %s returned with missing related data", order_id)

    order = {
        k: v
        for k, v in _shape_order(order_rows[0]).items()
        if k not in ("items", "payments", "notes")
    }
    return OrderDetail(
        **order,
        items=items or [],
        payments=payments or [],
        notes=[_shape_note(n) for n in notes or []],
        partial=partial,
    )


@router.patch("/{order_id}", response_model=OrderOut, summary="Update an order")
def update_order(order_id: str, body: OrderUpdate, db: Client = Depends(get_db)) -> OrderOut:
    changes = body.changes()
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    res = db.table("orders").update(changes).eq("id", order_id).execute()
    if not res.data:
        raise HTTPException(status_code=404, detail=f"Order '{order_id}' not found")
    logger.info("Updated order %s: %s", order_id, sorted(changes))
    return _shape_order(res.data[0])


@router.delete("/{order_id}", status_code=204, summary="Delete an order")
def delete_order(order_id: str, db: Client = Depends(get_db)) -> Response:
    res = db.table("orders").delete().eq("id", order_id).execute()
    if not res.data:
        raise HTTPException(status_code=404, detail=f"Order '{order_id}' not found")
    logger.info("Deleted order %s", order_id)
    return Response(status_code=204)


@router.post(
    "/{order_id}/payments",
    response_model=OrderOut,
    status_code=201,
    summary="Record a payment",
)
def add_payment(order_id: str, body: PaymentCreate, db: Client = Depends(get_db)) -> OrderOut:
    """
    Insert the payment, then recompute ``amount_paid``, ``balance`` and
    ``payment_status`` from the full payment history.
    """
    order = _get_order_row(order_id, db)
    updated = record_payment(
        db,
        parent_table="orders",
        payment_table="order_payments",
        parent_key="order_id",
        parent={**order, "id": order_id},
        body=body,
        label="order",
    )
    return _shape_order(updated)


@router.post(
    "/{order_id}/notes",
    response_model=NoteOut,
    status_code=201,
    summary="Add a note",
)
def add_note(order_id: str, body: NoteCreate, db: Client = Depends(get_db)) -> NoteOut:
    _get_order_row(order_id, db)
    note = insert_note(
        db, "notes", {"linked_item_id": order_id, "linked_item_type": "order"}, body
    )
    return _shape_note(note)


@router.get("/{order_id}/items", response_model=List[OrderItemOut], summary="List line items")
def list_items(order_id: str, db: Client = Depends(get_db)) -> List[OrderItemOut]:
    return list_children(db, "order_items", "order_id", order_id, "created_at")


@router.post(
    "/{order_id}/items",
    response_model=OrderItemOut,
    status_code=201,
    summary="Add a line item",
)
def add_item(order_id: str, body: OrderItemIn, db: Client = Depends(get_db)) -> OrderItemOut:
    """
    Insert the line, then recompute the order's ``total_amount`` from all of
    its lines and its balance from the payment history.
    """
    _get_order_row(order_id, db)
    res = db.table("order_items").insert(_line_record(order_id, body)).execute()
    if not res.data:
        raise HTTPException(status_code=500, detail="Failed to add item")

    lines = db.table("order_items").select("total_amount").eq("order_id", order_id).execute()
    total = round(sum(float(line.get("total_amount") or 0) for line in lines.data or []), 2)
    paid = paid_total(db, "order_payments", "order_id", order_id)
    settle(db, "orders", order_id, total, paid, "order", extra={"total_amount": total})

    logger.info("Added item %s to order %s (total=%.2f)", body.item_id, order_id, total)
    return res.data[0]
