"""
tests/test_materials.py
────────────────────────
Material purchases with their payments and notes.
"""

from app.api.responses import LIST_CACHE_CONTROL

PURCHASE = {
    "id": "m1",
    "supplier_name": "Paper Co",
    "material_name": "Vinyl roll",
    "date": "2024-04-01",
    "quantity": 4,
    "unit": "rolls",
    "unit_price": 25.0,
    "total_amount": 100.0,
    "amount_paid": 0.0,
    "balance": 100.0,
    "payment_status": "unpaid",
}


class TestListPurchases:
    async def test_filters_and_page(self, app_client, use_tables, make_query):
        purchases = make_query([PURCHASE], count=7)
        use_tables({"material_purchases": purchases})

        resp = await app_client.get(
            "/api/material-purchases",
            params={"supplier": "paper", "payment_status": "unpaid", "offset": 5, "limit": 5},
        )

        assert resp.status_code == 200
        assert resp.json()["total_count"] == 7
        assert resp.json()["purchases"][0]["supplier_name"] == "Paper Co"
        assert resp.headers["cache-control"] == LIST_CACHE_CONTROL
        purchases.ilike.assert_called_once_with("supplier_name", "%paper%")
        purchases.eq.assert_called_once_with("payment_status", "unpaid")
        purchases.range.assert_called_once_with(5, 9)

    async def test_unknown_payment_status(self, app_client):
        resp = await app_client.get(
            "/api/material-purchases", params={"payment_status": "overdue"}
        )
        assert resp.status_code == 400


class TestCreatePurchase:
    async def test_unit_price_defaults_from_total(self, app_client, use_tables, make_query):
        purchases = make_query([PURCHASE])
        payments = make_query([])
        use_tables({"material_purchases": purchases, "material_payments": payments})

        resp = await app_client.post(
            "/api/material-purchases",
            json={
                "supplier_name": "Paper Co",
                "material_name": "Vinyl roll",
                "date": "2024-04-01",
                "quantity": 4,
                "total_amount": 100,
            },
        )

        assert resp.status_code == 201
        record = purchases.insert.call_args.args[0]
        assert record["unit_price"] == 25.0
        assert record["payment_status"] == "unpaid"
        payments.insert.assert_not_called()

    async def test_upfront_payment_is_recorded(self, app_client, use_tables, make_query):
        purchases = make_query([PURCHASE])
        payments = make_query([])
        use_tables({"material_purchases": purchases, "material_payments": payments})

        resp = await app_client.post(
            "/api/material-purchases",
            json={
                "supplier_name": "Paper Co",
                "material_name": "Vinyl roll",
                "date": "2024-04-01",
                "quantity": 4,
                "total_amount": 100,
                "amount_paid": 30,
            },
        )

        assert resp.status_code == 201
        assert purchases.insert.call_args.args[0]["balance"] == 70.0
        assert payments.insert.call_args.args[0]["purchase_id"] == "m1"

    async def test_failed_payment_removes_purchase(
        self, app_client, use_tables, make_query, db_error
    ):
        purchases = make_query([PURCHASE])
        use_tables(
            {"material_purchases": purchases, "material_payments": make_query(error=db_error)}
        )

        resp = await app_client.post(
            "/api/material-purchases",
            json={
                "supplier_name": "Paper Co",
                "material_name": "Vinyl roll",
                "date": "2024-04-01",
                "quantity": 4,
                "total_amount": 100,
                "amount_paid": 30,
            },
        )

        assert resp.status_code == 500
        purchases.delete.assert_called_once_with()

    async def test_overpayment_is_rejected(self, app_client):
        resp = await app_client.post(
            "/api/material-purchases",
            json={
                "supplier_name": "Paper Co",
                "material_name": "Vinyl roll",
                "date": "2024-04-01",
                "quantity": 1,
                "total_amount": 10,
                "amount_paid": 11,
            },
        )
        assert resp.status_code == 400


class TestPurchaseDetail:
    async def test_batches_payments_and_notes(self, app_client, use_tables, make_query):
        use_tables(
            {
                "material_purchases": make_query([PURCHASE]),
                "material_payments": make_query(
                    [{"id": "p1", "purchase_id": "m1", "amount": 50.0}]
                ),
                "material_purchase_notes": make_query(
                    [{"id": "n1", "purchase_id": "m1", "text": "Deliver Friday"}]
                ),
            }
        )

        resp = await app_client.get("/api/material-purchases/m1")

        assert resp.status_code == 200
        body = resp.json()
        assert body["payments"][0]["amount"] == 50.0
        assert body["purchase_notes"][0]["text"] == "Deliver Friday"
        assert body["partial"] is False

    async def test_failed_notes_are_partial(self, app_client, use_tables, make_query, db_error):
        use_tables(
            {
                "material_purchases": make_query([PURCHASE]),
                "material_purchase_notes": make_query(error=db_error),
            }
        )
        resp = await app_client.get("/api/material-purchases/m1")
        assert resp.json()["partial"] is True
        assert resp.json()["purchase_notes"] == []

    async def test_missing(self, app_client):
        resp = await app_client.get("/api/material-purchases/m9")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Material purchase 'm9' not found"}

    async def test_delete(self, app_client, use_tables, make_query):
        use_tables({"material_purchases": make_query([PURCHASE])})
        resp = await app_client.delete("/api/material-purchases/m1")
        assert resp.status_code == 204


class TestPurchaseLedger:
    async def test_payment_recomputes_balance(self, app_client, use_tables, make_query):
        purchases = make_query([PURCHASE])
        payments = make_query([{"amount": 30.0}, {"amount": 20.0}])
        use_tables({"material_purchases": purchases, "material_payments": payments})

        resp = await app_client.post(
            "/api/material-purchases/m1/payments", json={"amount": 20, "created_by": "u1"}
        )

        assert resp.status_code == 201
        assert payments.insert.call_args.args[0]["created_by"] == "u1"
        purchases.update.assert_called_once_with(
            {"amount_paid": 50.0, "balance": 50.0, "payment_status": "partially_paid"}
        )

    async def test_list_payments(self, app_client, use_tables, make_query):
        payments = make_query([{"id": "p1", "purchase_id": "m1", "amount": 30.0}])
        use_tables({"material_payments": payments})
        resp = await app_client.get("/api/material-purchases/m1/payments")
        assert resp.json()[0]["id"] == "p1"
        payments.eq.assert_called_once_with("purchase_id", "m1")

    async def test_add_and_list_notes(self, app_client, use_tables, make_query):
        notes = make_query([{"id": "n1", "purchase_id": "m1", "text": "Short by one roll"}])
        use_tables({"material_purchases": make_query([PURCHASE]), "material_purchase_notes": notes})

        created = await app_client.post(
            "/api/material-purchases/m1/notes", json={"text": "Short by one roll"}
        )
        listed = await app_client.get("/api/material-purchases/m1/notes")

        assert created.status_code == 201
        assert notes.insert.call_args.args[0]["purchase_id"] == "m1"
        assert listed.json()[0]["text"] == "Short by one roll"

    async def test_note_on_missing_purchase(self, app_client):
        resp = await app_client.post("/api/material-purchases/m9/notes", json={"text": "x"})
        assert resp.status_code == 404
