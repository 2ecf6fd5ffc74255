"""
tests/test_analytics.py
────────────────────────
Order metrics and analytics computed with pandas.
"""

from analytics.orders import compute_order_analytics, compute_order_metrics, orders_frame

ROWS = [
    {
        "id": "1", "client_id": "k1", "client_name": "Acme", "date": "2024-01-15",
        "status": "completed", "payment_status": "paid",
        "total_amount": 100, "amount_paid": 100, "balance": 0,
    },
    {
        "id": "2", "client_id": "k1", "client_name": "Acme", "date": "2024-01-20",
        "status": "pending", "payment_status": "unpaid",
        "total_amount": 50, "amount_paid": 0, "balance": 50,
    },
    {
        "id": "3", "client_id": "k2", "client_name": None, "clients": {"name": "Beta"},
        "date": "2024-02-03", "status": "in_progress", "payment_status": "partially_paid",
        "total_amount": 200, "amount_paid": 120, "balance": 80,
    },
    {
        "id": "4", "client_id": None, "date": None, "status": "delivered",
        "payment_status": "paid", "total_amount": None, "amount_paid": None, "balance": None,
    },
]


def test_frame_normalises_amounts_and_joined_names():
    df = orders_frame(ROWS)
    assert df.loc[3, "total_amount"] == 0.0
    assert df.loc[2, "client_name"] == "Beta"


def test_metrics():
    metrics = compute_order_metrics(ROWS)
    assert metrics == {
        "total_orders": 4,
        "total_revenue": 350.0,
        "pending_orders": 2,
        "active_clients": 2,
        "completed_orders": 2,
        "unpaid_orders": 2,
        "unpaid_total": 130.0,
    }


def test_metrics_uses_reported_count():
    assert compute_order_metrics(ROWS, total_count=10)["total_orders"] == 10


def test_metrics_on_no_rows():
    metrics = compute_order_metrics([])
    assert metrics["total_orders"] == 0
    assert metrics["total_revenue"] == 0.0


def test_analytics():
    result = compute_order_analytics(ROWS)

    assert result["avg_order_value"] == 87.5
    assert result["completion_rate"] == 50.0
    assert result["clients_with_debt"] == [
        {"id": "k2", "name": "Beta", "debt": 80.0, "order_count": 1},
        {"id": "k1", "name": "Acme", "debt": 50.0, "order_count": 1},
    ]
    assert result["revenue_by_month"] == [
        {"month": "2024-01", "revenue": 150.0, "orders": 2},
        {"month": "2024-02", "revenue": 200.0, "orders": 1},
    ]


def test_analytics_on_no_rows():
    result = compute_order_analytics([])
    assert result["avg_order_value"] == 0.0
    assert result["clients_with_debt"] == []
    assert result["revenue_by_month"] == []
