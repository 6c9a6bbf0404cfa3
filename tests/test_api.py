from fastapi.testclient import TestClient

from storefront.identity_service.main import app as identity_app
from tests.conftest import ADDRESS, auth


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "ok", "redis": "ok"}


def test_product_detail(client, shirt):
    product_id, variants = shirt

    resp = client.get(f"/products/{product_id}", params={"size": "M", "color": "Navy"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["selected_variant_id"] == variants[("M", "Navy")]
    assert body["price"] == "60.00"
    assert body["orderable"] is True


def test_product_not_found(client):
    assert client.get("/products/999").status_code == 404


def test_cart_requires_sign_in(client):
    assert client.get("/cart").status_code == 401


def test_cart_flow(client, shirt):
    product_id, variants = shirt

    resp = client.post(
        "/cart/items",
        json={"product_id": product_id, "variant_id": variants[("M", "White")], "quantity": 2},
        headers=auth("alice"),
    )
    assert resp.status_code == 201
    line_id = resp.json()["id"]

    resp = client.patch(f"/cart/items/{line_id}", json={"quantity": 3}, headers=auth("alice"))
    assert resp.status_code == 200
    assert resp.json()["quantity"] == 3

    assert client.patch(f"/cart/items/{line_id}", json={"quantity": 0}, headers=auth("alice")).status_code == 400
    assert client.delete(f"/cart/items/{line_id}", headers=auth("bob")).status_code == 403

    cart = client.get("/cart", headers=auth("alice")).json()
    assert cart["totals"]["subtotal"] == "150.00"
    assert cart["totals"]["shipping"] == "0.00"

    assert client.delete(f"/cart/items/{line_id}", headers=auth("alice")).status_code == 204
    assert client.get("/cart", headers=auth("alice")).json()["items"] == []


def test_add_sold_out_is_conflict(client, shirt):
    product_id, variants = shirt

    resp = client.post(
        "/cart/items",
        json={"product_id": product_id, "variant_id": variants[("M", "Navy")], "quantity": 3},
        headers=auth("alice"),
    )

    assert resp.status_code == 409


def test_checkout_and_order_views(client, shirt):
    product_id, variants = shirt
    client.post(
        "/cart/items",
        json={"product_id": product_id, "variant_id": variants[("S", "White")], "quantity": 1},
        headers=auth("alice"),
    )

    headers = {**auth("alice"), "Idempotency-Key": "api-key-1"}
    resp = client.post("/orders", json={"shipping_address": ADDRESS, "payment_method": "card"}, headers=headers)
    assert resp.status_code == 201
    order = resp.json()
    assert order["status"] == "confirmed"
    assert order["total"] == "63.99"

    again = client.post("/orders", json={"shipping_address": ADDRESS}, headers=headers)
    assert again.status_code == 201
    assert again.json()["id"] == order["id"]

    assert [o["id"] for o in client.get("/orders", headers=auth("alice")).json()] == [order["id"]]
    assert client.get(f"/orders/{order['id']}", headers=auth("alice")).status_code == 200
    assert client.get(f"/orders/{order['id']}", headers=auth("bob")).status_code == 403


def test_checkout_with_blank_field(client, shirt):
    product_id, variants = shirt
    client.post(
        "/cart/items",
        json={"product_id": product_id, "variant_id": variants[("S", "White")]},
        headers=auth("alice"),
    )

    resp = client.post(
        "/orders",
        json={"shipping_address": dict(ADDRESS, phone=""), "payment_method": "card"},
        headers=auth("alice"),
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please fill in your phone"


def test_checkout_in_progress_detail(client, shirt, lock_service):
    product_id, variants = shirt
    client.post(
        "/cart/items",
        json={"product_id": product_id, "variant_id": variants[("S", "White")]},
        headers=auth("alice"),
    )
    lock_service.acquire_checkout_lock(1, "other-tab")

    resp = client.post(
        "/orders",
        json={"shipping_address": ADDRESS},
        headers={**auth("alice"), "Idempotency-Key": "busy-key"},
    )

    assert resp.status_code == 409
    detail = resp.json()["detail"]
    assert detail["stage"] == "validating"
    assert detail["idempotency_key"] == "busy-key"


def test_admin_status_change(client, shirt):
    product_id, variants = shirt
    client.post(
        "/cart/items",
        json={"product_id": product_id, "variant_id": variants[("S", "White")]},
        headers=auth("alice"),
    )
    order = client.post("/orders", json={"shipping_address": ADDRESS}, headers=auth("alice")).json()
    url = f"/orders/{order['id']}/status"

    assert client.patch(url, json={"status": "shipped"}, headers=auth("alice")).status_code == 403
    assert client.patch(url, json={"status": "delivered"}, headers=auth("admin")).status_code == 400

    resp = client.patch(url, json={"status": "shipped"}, headers=auth("admin"))
    assert resp.status_code == 200
    assert resp.json()["status"] == "shipped"


def test_admin_sets_stock(client, shirt):
    _, variants = shirt
    url = f"/inventory/{variants[('M', 'White')]}"

    assert client.put(url, json={"quantity": 9}, headers=auth("alice")).status_code == 403

    resp = client.put(url, json={"quantity": 9, "low_stock_threshold": 2}, headers=auth("admin"))
    assert resp.status_code == 200
    assert resp.json()["available"] == 9


def test_identity_mock_service():
    with TestClient(identity_app) as c:
        assert c.get("/me").status_code == 401
        assert c.get("/me", headers=auth("nope")).status_code == 401

        me = c.get("/me", headers=auth("admin-token")).json()
        assert me["id"] == 99
        assert me["is_admin"] is True
