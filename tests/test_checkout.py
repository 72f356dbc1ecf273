"""Tests for the checkout flow and its test variant."""
import pytest

import checkout as checkout_flow
from errors import UpstreamError, ValidationFailed
from schemas import CheckoutRequest


def _body(product, quantity=1, user_id=None, price=120.0):
    body = {
        "customerInfo": {"name": "Alice", "email": "alice@example.com", "address": "Rua A, 1"},
        "cart": [{"id": product["id"], "name": product["name"], "quantity": quantity, "price": price}],
        "total": price * quantity,
    }
    if user_id:
        body["userId"] = user_id
    return body


def test_checkout_creates_order_and_payment_link(client, store, payments, product):
    resp = client.post("/api/checkout", json=_body(product, quantity=2, user_id="alice-id"))
    assert resp.status_code == 200

    orders = store.select("orders")
    assert len(orders) == 1
    order = orders[0]
    assert order["status"] == "Awaiting Payment"
    assert order["user_id"] == "alice-id"
    assert order["customer_email"] == "alice@example.com"
    assert order["shipping_address"] == "Rua A, 1"
    assert order["total"] == 240.0
    assert order["items"][0]["quantity"] == 2

    assert resp.json() == {"status": "success", "paymentUrl": f"https://checkout.stripe.test/pay/{order['id']}"}
    call = payments.calls[0]
    assert call["external_reference"] == order["id"]
    assert call["payer"] == {"email": "alice@example.com", "name": "Alice"}
    assert call["items"][0]["name"] == "Oak Chair"


def test_checkout_insufficient_stock(client, store, payments, product):
    resp = client.post("/api/checkout", json=_body(product, quantity=3))
    assert resp.status_code == 400
    body = resp.json()
    assert body["status"] == "error"
    assert "Oak Chair" in body["message"]
    assert store.select("orders") == []
    assert payments.calls == []


def test_checkout_unknown_product(client, store, product):
    body = _body(product)
    body["cart"].append({"id": "665f1c2e9b1e8a0012345678", "name": "Ghost", "quantity": 1, "price": 1})
    resp = client.post("/api/checkout", json=body)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Insufficient stock: Ghost"
    assert store.select("orders") == []


def test_checkout_does_not_touch_stock(client, store, product):
    client.post("/api/checkout", json=_body(product, quantity=2))
    assert store.select_one("products", {"id": product["id"]})["stock"] == 2


def test_checkout_empty_cart_places_order(client, store, payments, product):
    body = _body(product)
    body["cart"] = []
    resp = client.post("/api/checkout", json=body)
    assert resp.status_code == 200
    orders = store.select("orders")
    assert len(orders) == 1
    assert orders[0]["total"] == 0
    assert payments.calls[0]["items"] == []


def test_payment_failure_leaves_order_awaiting_payment(client, store, payments, product):
    payments.error = UpstreamError("Invalid API Key provided")
    resp = client.post("/api/checkout", json=_body(product))
    assert resp.status_code == 400
    assert resp.json() == {"status": "error", "message": "Invalid API Key provided"}

    orders = store.select("orders")
    assert len(orders) == 1
    assert orders[0]["status"] == "Awaiting Payment"


def test_checkout_test_variant(client, store, payments, product):
    resp = client.post("/api/checkout-teste", json=_body(product, quantity=2))
    assert resp.status_code == 200
    assert resp.json() == {"status": "success"}
    orders = store.select("orders")
    assert len(orders) == 1
    assert orders[0]["status"] == "Payment Approved (Test)"
    assert payments.calls == []


def test_checkout_test_variant_checks_stock(client, store, product):
    resp = client.post("/api/checkout-teste", json=_body(product, quantity=5))
    assert resp.status_code == 400
    assert resp.json()["status"] == "error"
    assert store.select("orders") == []


def test_checkout_rejects_bad_email(client, product):
    body = _body(product)
    body["customerInfo"]["email"] = "not-an-email"
    resp = client.post("/api/checkout", json=body)
    assert resp.status_code == 400
    body = resp.json()
    assert body["status"] == "error"
    assert "email" in body["message"]


def test_total_is_computed_from_cart(store, product):
    req = CheckoutRequest.model_validate(_body(product, quantity=2))
    req.total = 1.0
    order = checkout_flow.checkout_test(store, req)
    assert order["total"] == 240.0


def test_check_stock_stops_at_first_short_line(store, product):
    req = CheckoutRequest.model_validate(_body(product, quantity=9))
    with pytest.raises(ValidationFailed) as exc:
        checkout_flow.check_stock(store, req.cart)
    assert exc.value.message == "Insufficient stock: Oak Chair"


def test_payment_failure_still_counts_as_pending(client, store, payments, product, admin_headers):
    payments.error = UpstreamError("card network down")
    client.post("/api/checkout", json=_body(product))
    stats = client.get("/api/admin/dashboard", headers=admin_headers).json()
    assert stats["totalOrders"] == 1
    assert stats["pendingOrders"] == 1


def test_order_insert_failure_aborts_checkout(client, store, payments, product, monkeypatch):
    def insert(collection, record):
        raise UpstreamError("E11000 duplicate key error")

    monkeypatch.setattr(store, "insert", insert)
    resp = client.post("/api/checkout", json=_body(product))
    assert resp.status_code == 400
    assert resp.json() == {"status": "error", "message": "E11000 duplicate key error"}
    assert payments.calls == []


def test_checkout_missing_cart(client, store, product):
    body = _body(product)
    del body["cart"]
    for path in ("/api/checkout", "/api/checkout-teste"):
        resp = client.post(path, json=body)
        assert resp.status_code == 400
        data = resp.json()
        assert data["status"] == "error"
        assert "cart" in data["message"]
    assert store.select("orders") == []
