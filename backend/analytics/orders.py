"""
analytics/orders.py
───────────────────
Order metrics and analytics computed from raw ``orders`` rows.

Used by ``GET /api/orders/metrics`` and ``GET /api/orders/analytics``.
Rows come straight from Supabase, so amounts may be ``None`` and dates
may be missing; both are normalised before aggregation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from schemas.orders import COMPLETED_STATUSES, PENDING_STATUSES, UNPAID_STATUSES

logger = logging.getLogger(__name__)

_AMOUNT_COLUMNS = ("total_amount", "amount_paid", "balance")
_TEXT_COLUMNS = ("status", "payment_status", "client_id", "client_name", "date")


def orders_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Build a normalised DataFrame from order rows.

    Missing amount columns become ``0.0``; missing text columns become
    ``None``.  A nested ``clients: {name}`` join result fills
    ``client_name`` when the denormalised column is empty.
    """
    df = pd.DataFrame(rows)
    for col in _AMOUNT_COLUMNS:
        if col not in df.columns:
            df[col] = 0.0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
    for col in _TEXT_COLUMNS:
        if col not in df.columns:
            df[col] = None
    if "clients" in df.columns:
        joined = df["clients"].map(lambda c: c.get("name") if isinstance(c, dict) else None)
        df["client_name"] = df["client_name"].where(df["client_name"].notna(), joined)
    return df


def compute_order_metrics(
    rows: List[Dict[str, Any]], total_count: Optional[int] = None
) -> Dict[str, Any]:
    """
    Headline counters for the orders dashboard.

    Args:
        rows:        Order rows (already filtered by the caller).
        total_count: Exact count reported by the database, if any.

    Returns:
        Dict matching :class:`schemas.orders.OrderMetrics`.
    """
    df = orders_frame(rows)
    unpaid = df[df["payment_status"].isin(UNPAID_STATUSES)]
    return {
        "total_orders": int(total_count if total_count is not None else len(df)),
        "total_revenue": round(float(df["total_amount"].sum()), 2),
        "pending_orders": int(df["status"].isin(PENDING_STATUSES).sum()),
        "active_clients": int(df["client_id"].dropna().nunique()),
        "completed_orders": int(df["status"].isin(COMPLETED_STATUSES).sum()),
        "unpaid_orders": int(len(unpaid)),
        "unpaid_total": round(float(unpaid["balance"].sum()), 2),
    }


def _clients_with_debt(df: pd.DataFrame) -> List[Dict[str, Any]]:
    owing = df[
        df["payment_status"].isin(UNPAID_STATUSES)
        & (df["balance"] > 0)
        & df["client_id"].notna()
    ]
    if owing.empty:
        return []
    grouped = (
        owing.assign(client_name=owing["client_name"].fillna("Unknown Client"))
        .groupby("client_id", sort=False)
        .agg(name=("client_name", "first"), debt=("balance", "sum"), order_count=("balance", "size"))
        .sort_values("debt", ascending=False)
    )
    return [
        {
            "id": str(client_id),
            "name": str(row["name"]),
            "debt": round(float(row["debt"]), 2),
            "order_count": int(row["order_count"]),
        }
        for client_id, row in grouped.iterrows()
    ]


def _revenue_by_month(df: pd.DataFrame) -> List[Dict[str, Any]]:
    dates = pd.to_datetime(df["date"], errors="coerce")
    dated = df.assign(_month=dates.dt.strftime("%Y-%m")).dropna(subset=["_month"])
    if dated.empty:
        return []
    monthly = (
        dated.groupby("_month")
        .agg(revenue=("total_amount", "sum"), orders=("total_amount", "size"))
        .sort_index()
    )
    return [
        {"month": month, "revenue": round(float(row["revenue"]), 2), "orders": int(row["orders"])}
        for month, row in monthly.iterrows()
    ]


def compute_order_analytics(
    rows: List[Dict[str, Any]], total_count: Optional[int] = None
) -> Dict[str, Any]:
    """
    Metrics plus derived ratios, debtor ranking and monthly revenue.

    Returns:
        Dict matching :class:`schemas.orders.OrderAnalytics`.
    """
    metrics = compute_order_metrics(rows, total_count)
    df = orders_frame(rows)

    total = metrics["total_orders"]
    metrics["avg_order_value"] = round(metrics["total_revenue"] / total, 2) if total else 0.0
    metrics["completion_rate"] = (
        round(metrics["completed_orders"] / total * 100.0, 2) if total else 0.0
    )
    metrics["clients_with_debt"] = _clients_with_debt(df) if not df.empty else []
    metrics["revenue_by_month"] = _revenue_by_month(df) if not df.empty else []

    logger.debug(
        "Analytics over %d orders: %d debtor(s), %d month(s)",
        total,
        len(metrics["clients_with_debt"]),
        len(metrics["revenue_by_month"]),
    )
    return metrics
