"""Tests for order placement and reading orders back."""

import json
import re
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart.cart import ShoppingCart
from storefront.order.lifecycle import OrderLifecycle
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.shared.results import PersistenceError, PreconditionError, StaleCartError

PLACED = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


@pytest.fixture()
def lifecycle():
    return OrderLifecycle(clock=lambda: PLACED)


def _orders():
    return current_domain.repository_for(Order)._dao.query.all().items


class TestCreateOrder:
    def test_returns_order_id(self, lifecycle, filled_cart, shipping, payment):
        result = lifecycle.create_order(filled_cart, shipping, payment)

        assert result.ok
        assert re.fullmatch(r"ORD-[0-9A-F]{12}", result.value)

    def test_persists_snapshot_and_totals(self, lifecycle, filled_cart, shipping, payment):
        order_id = lifecycle.create_order(filled_cart, shipping, payment).value

        order = current_domain.repository_for(Order).get(order_id)
        assert order.created_at == PLACED
        assert len(order.lines) == 1
        assert order.lines[0].product_id == "prod-mug"
        assert order.lines[0].quantity == 2
        assert order.subtotal == pytest.approx(199.98)
        assert order.tax == 16.00
        assert order.total == pytest.approx(215.98)
        assert order.shipping_info.country == "United States"

    def test_stores_only_masked_card(self, lifecycle, filled_cart, shipping, payment):
        order_id = lifecycle.create_order(filled_cart, shipping, payment).value

        card = current_domain.repository_for(Order).get(order_id).payment_card
        assert card.last4 == "4242"
        assert card.brand == "Visa"
        stored = json.dumps(card.to_dict())
        assert "4242424242424242" not in stored
        assert "123" not in stored

    def test_clears_cart(self, lifecycle, filled_cart, shipping, payment):
        lifecycle.create_order(filled_cart, shipping, payment)

        assert filled_cart.is_empty
        assert current_domain.repository_for(ShoppingCart).get(filled_cart.cart_id).lines == []

    def test_empty_cart_is_precondition_error(self, lifecycle, cart, shipping, payment):
        result = lifecycle.create_order(cart, shipping, payment)

        assert isinstance(result.error, PreconditionError)
        assert result.error.message == "empty cart"
        assert _orders() == []

    def test_invalid_input_rejected(self, lifecycle, filled_cart, shipping, payment):
        result = lifecycle.create_order(filled_cart, {**shipping, "zip_code": "1"}, {**payment, "cvv": ""})

        assert isinstance(result.error, ValidationError)
        assert result.field_errors == {"zip_code": ["ZIP Code is invalid"], "cvv": ["CVV is required"]}
        assert not filled_cart.is_empty
        assert _orders() == []

    def test_expired_card_judged_by_clock(self, filled_cart, shipping, payment):
        lifecycle = OrderLifecycle(clock=lambda: datetime(2031, 1, 1, tzinfo=UTC))
        result = lifecycle.create_order(filled_cart, shipping, payment)

        assert result.field_errors == {"expiry_year": ["Invalid year"]}

    def test_cart_changed_since_review(self, lifecycle, filled_cart, mug, shipping, payment):
        from storefront.cart.store import CartStore

        CartStore.open("sess-001").add_item(mug, quantity=1)
        result = lifecycle.create_order(filled_cart, shipping, payment)

        assert isinstance(result.error, StaleCartError)
        assert _orders() == []
        assert filled_cart.item_count() == 3

    def test_store_failure_leaves_cart_intact(self, lifecycle, filled_cart, shipping, payment):
        with patch.object(ShoppingCart, "clear", side_effect=RuntimeError("write failed")):
            result = lifecycle.create_order(filled_cart, shipping, payment)

        assert isinstance(result.error, PersistenceError)
        assert _orders() == []
        assert current_domain.repository_for(ShoppingCart).get(filled_cart.cart_id).lines[0].quantity == 2


class TestPlaceOrderHandler:
    def test_raises_on_empty_cart(self, cart, shipping):
        command = PlaceOrder(
            cart_id=cart.cart_id,
            expected_revision=cart.revision,
            shipping_info=json.dumps(shipping),
            payment_card=json.dumps({"cardholder_name": "A", "last4": "4242", "expiry_month": "09", "expiry_year": "2030"}),
        )
        with pytest.raises(PreconditionError):
            current_domain.process(command, asynchronous=False)


class TestGetOrder:
    def test_unknown_order(self, lifecycle):
        result = lifecycle.get_order("ORD-000000000000")
        assert isinstance(result.error, ObjectNotFoundError)

    def test_processing_view(self, lifecycle, filled_cart, shipping, payment):
        order_id = lifecycle.create_order(filled_cart, shipping, payment).value
        view = lifecycle.get_order(order_id, now=PLACED + timedelta(hours=1)).unwrap()

        assert view.order_id == order_id
        assert view.status == "processing"
        assert view.tracking_number is None
        assert view.item_count == 2
        assert view.payment_card.last4 == "4242"

    def test_first_shipped_read_fixes_tracking(self, lifecycle, filled_cart, shipping, payment):
        order_id = lifecycle.create_order(filled_cart, shipping, payment).value

        shipped = lifecycle.get_order(order_id, now=PLACED + timedelta(hours=49)).unwrap()
        delivered = lifecycle.get_order(order_id, now=PLACED + timedelta(hours=121)).unwrap()

        assert shipped.status == "shipped"
        assert delivered.status == "delivered"
        assert shipped.tracking_number == delivered.tracking_number
        assert shipped.estimated_delivery == "2026-03-06"
        stored = current_domain.repository_for(Order).get(order_id)
        assert stored.tracking_number == shipped.tracking_number

    def test_read_does_not_touch_money(self, lifecycle, filled_cart, shipping, payment):
        order_id = lifecycle.create_order(filled_cart, shipping, payment).value
        view = lifecycle.get_order(order_id, now=PLACED + timedelta(days=10)).unwrap()

        assert view.total == pytest.approx(215.98)
        assert [line.quantity for line in view.lines] == [2]
