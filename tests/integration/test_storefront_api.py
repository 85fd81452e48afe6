"""Integration tests for the storefront API via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain

from storefront.api.routes import UNVERIFIED_ORDER, cart_router, order_router
from storefront.catalogue import CatalogueProduct, InMemoryCatalogue, set_catalogue
from storefront.order.order import Order

CHECKOUT = {
    "shipping": {
        "full_name": "Ada Lovelace",
        "email": "ada@example.com",
        "address": "12 Analytical Way",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62704",
    },
    "payment": {
        "cardholder_name": "Ada Lovelace",
        "card_number": "5555 5555 5555 4444",
        "expiry_month": "12",
        "expiry_year": "2099",
        "cvv": "321",
    },
}


@pytest.fixture(autouse=True)
def catalogue():
    set_catalogue(
        InMemoryCatalogue(
            [
                CatalogueProduct(id="prod-mug", name="Enamel Mug", price=99.99),
                CatalogueProduct(id="prod-tee", name="Logo Tee", price=25.0, variants=("S", "M")),
            ]
        )
    )


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    return TestClient(app)


def _add(client, session_id="sess-001", product_id="prod-mug", quantity=2, variant=None):
    return client.post(
        f"/carts/{session_id}/items",
        json={"product_id": product_id, "quantity": quantity, "variant": variant},
    )


def _checkout(client, session_id="sess-001", body=CHECKOUT, headers=None):
    return client.post(f"/carts/{session_id}/checkout", json=body, headers=headers or {})


def _place(client):
    assert _add(client).status_code == 200
    response = _checkout(client)
    assert response.status_code == 201
    return response.json()["order_id"]


class TestCartEndpoints:
    def test_get_new_cart(self, client):
        response = client.get("/carts/sess-001")

        assert response.status_code == 200
        body = response.json()
        assert body["session_id"] == "sess-001"
        assert body["lines"] == []
        assert body["total"] == 0

    def test_add_item(self, client):
        response = _add(client)

        assert response.status_code == 200
        body = response.json()
        assert body["item_count"] == 2
        assert body["subtotal"] == pytest.approx(199.98)
        assert body["tax"] == 16.0
        assert body["total"] == pytest.approx(215.98)

    def test_add_unknown_product(self, client):
        assert _add(client, product_id="prod-nope").status_code == 404

    def test_variant_required(self, client):
        response = _add(client, product_id="prod-tee", variant=None)

        assert response.status_code == 422
        assert response.json()["detail"] == {"variant": ["variant required"]}

    def test_update_quantity(self, client):
        _add(client)
        response = client.put("/carts/sess-001/items/prod-mug", json={"quantity": 5})

        assert response.status_code == 200
        assert response.json()["item_count"] == 5

    def test_update_to_zero_removes(self, client):
        _add(client)
        response = client.put("/carts/sess-001/items/prod-mug", json={"quantity": 0})

        assert response.json()["lines"] == []

    def test_remove_item(self, client):
        _add(client, product_id="prod-tee", quantity=1, variant="M")
        response = client.delete("/carts/sess-001/items/prod-tee", params={"variant": "M"})

        assert response.status_code == 200
        assert response.json()["lines"] == []


class TestCheckoutEndpoint:
    def test_places_order(self, client):
        order_id = _place(client)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.payment_card.brand == "Mastercard"
        assert order.payment_card.last4 == "4444"
        assert client.get("/carts/sess-001").json()["lines"] == []

    def test_shipping_errors(self, client):
        _add(client)
        body = {**CHECKOUT, "shipping": {**CHECKOUT["shipping"], "zip_code": "9"}}
        response = _checkout(client, body=body)

        assert response.status_code == 422
        assert response.json()["detail"] == {"zip_code": ["ZIP Code is invalid"]}

    def test_payment_errors(self, client):
        _add(client)
        body = {**CHECKOUT, "payment": {**CHECKOUT["payment"], "cvv": "1"}}
        response = _checkout(client, body=body)

        assert response.status_code == 422
        assert "cvv" in response.json()["detail"]

    def test_empty_cart_conflict(self, client):
        response = _checkout(client)

        assert response.status_code == 409
        assert response.json()["detail"] == "empty cart"

    def test_email_defaults_to_identity(self, client):
        _add(client)
        body = {**CHECKOUT, "shipping": {**CHECKOUT["shipping"], "email": ""}}
        response = _checkout(client, body=body, headers={"X-Customer-Email": "ada@example.com"})

        assert response.status_code == 201
        order = current_domain.repository_for(Order).get(response.json()["order_id"])
        assert order.customer_email == "ada@example.com"


class TestOrderEndpoints:
    def test_track_order(self, client):
        order_id = _place(client)
        response = client.post("/orders/track", json={"order_id": order_id, "email": "ADA@example.com"})

        assert response.status_code == 200
        body = response.json()
        assert body["order_id"] == order_id
        assert body["status"] == "processing"
        assert body["payment_card"]["last4"] == "4444"
        assert "card_number" not in body["payment_card"]

    def test_mismatch_and_unknown_look_the_same(self, client):
        order_id = _place(client)
        mismatch = client.post("/orders/track", json={"order_id": order_id, "email": "grace@example.com"})
        unknown = client.post("/orders/track", json={"order_id": "ORD-FFFFFFFFFFFF", "email": "ada@example.com"})

        assert mismatch.status_code == unknown.status_code == 404
        assert mismatch.json() == unknown.json() == {"detail": UNVERIFIED_ORDER}

    def test_track_form_errors(self, client):
        response = client.post("/orders/track", json={"order_id": "", "email": "nope"})

        assert response.status_code == 422
        assert set(response.json()["detail"]) == {"order_id", "email"}

    def test_owned_order(self, client):
        order_id = _place(client)
        response = client.get(f"/orders/{order_id}", headers={"X-Customer-Email": "ada@example.com"})

        assert response.status_code == 200
        assert response.json()["order_id"] == order_id

    def test_owned_order_requires_identity(self, client):
        order_id = _place(client)
        assert client.get(f"/orders/{order_id}").status_code == 401

    def test_other_identity_gets_404(self, client):
        order_id = _place(client)
        response = client.get(f"/orders/{order_id}", headers={"X-Customer-Email": "grace@example.com"})

        assert response.status_code == 404
        assert response.json()["detail"] == UNVERIFIED_ORDER

    def test_order_history(self, client):
        order_id = _place(client)
        response = client.get("/orders", headers={"X-Customer-Email": "ada@example.com"})

        assert response.status_code == 200
        assert [order["order_id"] for order in response.json()] == [order_id]

    def test_order_history_status_filter(self, client):
        _place(client)
        response = client.get(
            "/orders",
            params={"status": "delivered"},
            headers={"X-Customer-Email": "ada@example.com"},
        )

        assert response.json() == []

    def test_order_history_search(self, client):
        order_id = _place(client)
        headers = {"X-Customer-Email": "ada@example.com"}

        by_name = client.get("/orders", params={"q": "enamel"}, headers=headers)
        by_id = client.get("/orders", params={"q": order_id.lower()}, headers=headers)
        missing = client.get("/orders", params={"q": "teapot"}, headers=headers)

        assert [order["order_id"] for order in by_name.json()] == [order_id]
        assert [order["order_id"] for order in by_id.json()] == [order_id]
        assert missing.json() == []
