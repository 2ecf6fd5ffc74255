"""
tests/test_keys.py
───────────────────
Fetch-key construction.
"""

import pytest

from data_client.keys import Resource, ResourceKey, build_key, keys_for_resource


class TestBuildKey:
    def test_collection_and_detail(self):
        assert build_key(Resource.ORDERS) == "/api/orders"
        assert build_key(Resource.ORDERS, "42") == "/api/orders/42"
        assert build_key(Resource.ORDERS, 42, "payments") == "/api/orders/42/payments"

    def test_params_are_sorted_and_none_dropped(self):
        a = build_key(Resource.ORDERS, status="pending", limit=50, search=None)
        b = build_key(Resource.ORDERS, limit=50, status="pending")
        assert a == b == "/api/orders?limit=50&status=pending"

    def test_list_params_repeat_in_order(self):
        key = build_key(Resource.ORDERS, status=["pending", "draft"])
        assert key == "/api/orders?status=pending&status=draft"

    def test_bools_render_lowercase(self):
        assert build_key(Resource.TASKS, archived=False) == "/api/tasks?archived=false"

    def test_values_are_url_encoded(self):
        assert build_key(Resource.ORDERS, search="a&b c") == "/api/orders?search=a%26b+c"

    def test_resource_accepts_plain_string(self):
        assert build_key("clients") == "/api/clients"

    def test_unknown_resource_rejected(self):
        with pytest.raises(ValueError):
            build_key("invoices-v2")


class TestResourceKey:
    def test_empty_segments_are_skipped(self):
        key = ResourceKey.of(Resource.ORDERS, None, "")
        assert key.path == "/api/orders"
        assert key.segments == ()

    def test_hashable_and_equal(self):
        a = ResourceKey.of(Resource.ITEMS, category_id="c1")
        b = ResourceKey.of(Resource.ITEMS, category_id="c1")
        assert a == b
        assert len({a, b}) == 1
        assert str(a) == "/api/items?category_id=c1"


def test_keys_for_resource():
    keys = ["/api/orders", "/api/orders/42", "/api/clients", "/api/orders/metrics"]
    assert keys_for_resource(keys, Resource.ORDERS) == [
        "/api/orders",
        "/api/orders/42",
        "/api/orders/metrics",
    ]
