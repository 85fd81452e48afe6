"""Order placement command and handler.

Placing an order and emptying the cart it came from happen in one unit of
work: either the order is stored and the cart is empty, or neither change
is visible. The command only ever carries the masked card.
"""

import json

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.cart.items import load_for_update
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.shared.results import PreconditionError

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    expected_revision = Integer(required=True)
    shipping_info = Text(required=True)  # JSON: ShippingInfo dict
    payment_card = Text(required=True)  # JSON: masked PaymentCard dict
    placed_at = DateTime()


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo, cart = load_for_update(command.cart_id, command.expected_revision)
        if not cart.lines:
            raise PreconditionError("empty cart")

        order = Order.place(
            line_snapshots=[line.to_snapshot() for line in cart.lines],
            shipping_info=json.loads(command.shipping_info),
            masked_card=json.loads(command.payment_card),
            created_at=command.placed_at,
            cart_id=str(cart.id),
        )
        cart.clear(order_id=str(order.id))

        current_domain.repository_for(Order).add(order)
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            cart_id=str(cart.id),
            line_count=len(order.lines),
            total=order.total,
        )
        return str(order.id)

