"""
HTTP route tests for the catalog, sales, income statements and user admin.
"""

import pytest

from vault.storage import get_storage


PRODUCT = {
    "name": "Data Analytics Suite",
    "description": "Dashboards, reports and forecasting",
    "price": 250000,
    "category": "product",
}


# =============================================================================
# PRODUCTS
# =============================================================================


class TestProducts:

    def test_create_and_list(self, client, sales_headers):
        resp = client.post("/api/products", json=PRODUCT, headers=sales_headers)
        assert resp.status_code == 201
        assert resp.json["id"] == 1
        assert resp.json["price"] == 250000

        resp = client.get("/api/products", headers=sales_headers)
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json] == ["Data Analytics Suite"]

    def test_invalid_product(self, client, sales_headers):
        resp = client.post("/api/products", json={**PRODUCT, "price": -5, "category": "gadget"}, headers=sales_headers)

        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid product data"
        assert {e["field"] for e in resp.json["errors"]} == {"category"}

    def test_non_json_body(self, client, sales_headers):
        resp = client.post("/api/products", data="nope", headers=sales_headers)
        assert resp.status_code == 400


# =============================================================================
# SALES
# =============================================================================


class TestSales:

    def test_created_by_is_acting_user(self, client, sales_headers, users, product):
        resp = client.post("/api/sales", json={
            "product_id": product["id"],
            "quantity": 2,
            "total_amount": 299800,
            "created_by": users["developer"]["id"],
        }, headers=sales_headers)

        assert resp.status_code == 201
        assert resp.json["created_by"] == users["sales"]["id"]
        assert resp.json["date"].endswith("Z")

    def test_unknown_product(self, client, sales_headers):
        resp = client.post("/api/sales", json={"product_id": 99, "quantity": 1, "total_amount": 100}, headers=sales_headers)

        assert resp.status_code == 400
        assert resp.json["errors"] == [{"field": "product_id", "message": "Product not found"}]
        assert get_storage().list_sales() == []

    @pytest.mark.parametrize("field", ["product_id", "quantity"])
    def test_oversized_integer_is_400(self, client, sales_headers, product, field):
        payload = {"product_id": product["id"], "quantity": 1, "total_amount": 100, field: 10 ** 20}

        resp = client.post("/api/sales", json=payload, headers=sales_headers)

        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid sale data"
        assert [e["field"] for e in resp.json["errors"]] == [field]
        assert get_storage().list_sales() == []

    def test_zero_quantity(self, client, sales_headers, product):
        resp = client.post("/api/sales", json={"product_id": product["id"], "quantity": 0, "total_amount": 100}, headers=sales_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid sale data"

    def test_finance_can_view_sales(self, client, sales_headers, finance_headers, product):
        client.post("/api/sales", json={"product_id": product["id"], "quantity": 1, "total_amount": 100}, headers=sales_headers)

        resp = client.get("/api/sales", headers=finance_headers)
        assert resp.status_code == 200
        assert len(resp.json) == 1


# =============================================================================
# INCOME STATEMENTS
# =============================================================================


class TestIncomeStatements:

    def test_loss_making_month(self, client, finance_headers, users):
        resp = client.post("/api/income", json={
            "month": 2,
            "year": 2026,
            "total_revenue": 100000,
            "total_expenses": 180000,
            "net_profit": -80000,
        }, headers=finance_headers)

        assert resp.status_code == 201
        assert resp.json["net_profit"] == -80000
        assert resp.json["created_by"] == users["finance"]["id"]

    def test_investor_can_read(self, client, headers_for):
        resp = client.get("/api/income", headers=headers_for("investor"))
        assert resp.status_code == 200
        assert resp.json == []

    def test_invalid_month(self, client, finance_headers):
        resp = client.post("/api/income", json={
            "month": 13, "year": 2026, "total_revenue": 0, "total_expenses": 0, "net_profit": 0,
        }, headers=finance_headers)
        assert resp.status_code == 400
        assert resp.json["message"] == "Invalid income statement data"


# =============================================================================
# USERS
# =============================================================================


class TestUserAdmin:

    def test_list_strips_password_hashes(self, client, developer_headers):
        resp = client.get("/api/users", headers=developer_headers)

        assert resp.status_code == 200
        assert len(resp.json) == 5
        assert all("password_hash" not in u for u in resp.json)

    def test_developer_creates_user(self, client, developer_headers):
        resp = client.post("/api/users", json={
            "username": "partner2",
            "password": "Password123",
            "full_name": "Second Partner",
            "email": "partner2@iwb.test",
            "role": "iwc_partner",
        }, headers=developer_headers)

        assert resp.status_code == 201
        assert resp.json["role"] == "iwc_partner"
        assert "password_hash" not in resp.json
        assert "token" not in resp.json

    def test_duplicate_user(self, client, developer_headers):
        resp = client.post("/api/users", json={
            "username": "sales_user",
            "password": "Password123",
            "full_name": "Copy",
            "email": "copy@iwb.test",
            "role": "sales",
        }, headers=developer_headers)

        assert resp.status_code == 400
        assert resp.json["errors"][0]["message"] == "Username already exists"


# =============================================================================
# ERROR HANDLERS
# =============================================================================


class TestErrorHandlers:

    def test_unknown_route_is_json(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert "message" in resp.json

    def test_wrong_method_is_json(self, client):
        resp = client.delete("/api/products")
        assert resp.status_code == 405
        assert "message" in resp.json

    def test_unexpected_error_is_500(self, app, client, sales_headers, monkeypatch):
        def broken():
            raise RuntimeError("boom")

        monkeypatch.setattr(get_storage(), "list_products", broken)

        resp = client.get("/api/products", headers=sales_headers)
        assert resp.status_code == 500
        assert resp.json == {"message": "Internal server error"}

    def test_cors_headers_for_allowed_origin(self, client):
        resp = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

        resp = client.get("/api/health", headers={"Origin": "http://evil.example"})
        assert "Access-Control-Allow-Origin" not in resp.headers


# =============================================================================
# HEALTH
# =============================================================================


class TestHealth:

    def test_health_does_not_scan_users(self, app, client, users, monkeypatch):
        def full_scan():
            raise AssertionError("health check listed every user")

        monkeypatch.setattr(get_storage(), "list_users", full_scan)

        resp = client.get("/api/health")

        assert resp.status_code == 200
        assert resp.json["checks"]["storage"]["status"] == "healthy"

    def test_unreachable_storage_is_503(self, app, client, monkeypatch):
        def broken(user_id):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(get_storage(), "get_user", broken)

        resp = client.get("/api/health")

        assert resp.status_code == 503
        assert resp.json["status"] == "unhealthy"
