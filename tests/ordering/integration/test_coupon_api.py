"""Integration tests for Coupon API endpoints via TestClient."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from app import app


@pytest.fixture()
def client():
    return TestClient(app)


def _auth(customer):
    return {"Authorization": f"Bearer {customer.access_token}"}


def _quote(client, customer, path, code, amount):
    return client.post(f"/coupons/{path}", json={"code": code, "order_amount": amount}, headers=_auth(customer))


def _coupon_payload(code="SAVE10", **overrides):
    now = datetime.now(UTC)
    payload = {
        "code": code,
        "description": "10% off",
        "discount_type": "PERCENTAGE",
        "discount_value": "10",
        "start_date": (now - timedelta(days=1)).isoformat(),
        "end_date": (now + timedelta(days=30)).isoformat(),
        "usage_limit": 100,
    }
    payload.update(overrides)
    return payload


class TestCouponAdministration:
    def test_create_and_fetch(self, client, admin):
        response = client.post("/coupons", json=_coupon_payload(), headers=_auth(admin))
        assert response.status_code == 201
        coupon = response.json()
        assert coupon["usage_count"] == 0
        assert coupon["discount_value"] == "10.00"

        detail = client.get(f"/coupons/{coupon['id']}", headers=_auth(admin))
        assert detail.json()["code"] == "SAVE10"

    def test_duplicate_code(self, client, admin):
        client.post("/coupons", json=_coupon_payload(), headers=_auth(admin))
        response = client.post("/coupons", json=_coupon_payload(), headers=_auth(admin))
        assert response.status_code == 409

    def test_invalid_terms(self, client, admin):
        response = client.post("/coupons", json=_coupon_payload(discount_value="150"), headers=_auth(admin))
        assert response.status_code == 422
        assert "discount_value" in response.json()["messages"]

    def test_update(self, client, admin):
        coupon_id = client.post("/coupons", json=_coupon_payload(), headers=_auth(admin)).json()["id"]
        payload = _coupon_payload(discount_type="FIXED_AMOUNT", discount_value="50")
        del payload["code"]
        response = client.put(f"/coupons/{coupon_id}", json=payload, headers=_auth(admin))
        assert response.status_code == 200
        assert response.json()["discount_type"] == "FIXED_AMOUNT"
        assert response.json()["code"] == "SAVE10"

    def test_delete(self, client, admin):
        coupon_id = client.post("/coupons", json=_coupon_payload(), headers=_auth(admin)).json()["id"]
        assert client.delete(f"/coupons/{coupon_id}", headers=_auth(admin)).status_code == 204
        assert client.get(f"/coupons/{coupon_id}", headers=_auth(admin)).status_code == 404

    def test_limit_below_recorded_uses_is_rejected(self, client, admin, customer, peri_peri):
        coupon_id = client.post("/coupons", json=_coupon_payload(usage_limit=5), headers=_auth(admin)).json()["id"]
        client.post("/cart/items", json={"product_id": peri_peri.id, "quantity": 1}, headers=_auth(customer))
        assert client.post("/orders", json={"coupon_code": "SAVE10"}, headers=_auth(customer)).status_code == 201

        payload = _coupon_payload(usage_limit=0)
        del payload["code"]
        response = client.put(f"/coupons/{coupon_id}", json=payload, headers=_auth(admin))
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
        assert list(response.json()["messages"]) == ["usage_limit"]
        assert client.get(f"/coupons/{coupon_id}", headers=_auth(admin)).json()["usage_limit"] == 5

    def test_customers_cannot_administer(self, client, customer):
        assert client.post("/coupons", json=_coupon_payload(), headers=_auth(customer)).status_code == 403
        assert client.get("/coupons", headers=_auth(customer)).status_code == 403


class TestPublicCouponListings:
    def test_active_and_first_time(self, client, make_coupon):
        make_coupon("SAVE10")
        make_coupon("WELCOME", first_time_user_only=True)
        make_coupon("OFF", active=False)

        assert {c["code"] for c in client.get("/coupons/active").json()} == {"SAVE10", "WELCOME"}
        assert [c["code"] for c in client.get("/coupons/first-time").json()] == ["WELCOME"]

    def test_by_code(self, client, make_coupon):
        make_coupon("SAVE10")
        assert client.get("/coupons/code/SAVE10").status_code == 200
        assert client.get("/coupons/code/NOPE").status_code == 404


class TestCouponQuote:
    def test_validate(self, client, customer, make_coupon):
        make_coupon("SAVE10", minimum_order_amount="500")
        response = _quote(client, customer, "validate", "SAVE10", "877.00")
        assert response.json() == {"code": "SAVE10", "valid": True}

        response = _quote(client, customer, "validate", "SAVE10", "100")
        assert response.json()["valid"] is False

    def test_calculate(self, client, customer, make_coupon):
        make_coupon("SAVE10")
        response = _quote(client, customer, "calculate", "SAVE10", "877.00")
        assert response.status_code == 200
        assert response.json()["discount"] == "87.70"

    def test_unknown_code_quotes_zero(self, client, customer):
        response = _quote(client, customer, "calculate", "NOPE", "877.00")
        assert response.json()["discount"] == "0.00"

    def test_first_time_derived_from_history(self, client, customer, make_coupon):
        make_coupon("WELCOME", first_time_user_only=True)
        response = _quote(client, customer, "validate", "WELCOME", "300")
        assert response.json()["valid"] is True


class TestHealth:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["environment"] == "test"
