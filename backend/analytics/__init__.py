"""
analytics — Business metrics computed with pandas.

Modules
-------
    analytics.orders   Order metrics, debtor ranking, monthly revenue.
"""

from analytics.orders import compute_order_analytics, compute_order_metrics

__all__ = ["compute_order_analytics", "compute_order_metrics"]
