"""Domain events for the Order aggregate.

Payment data in these events is always the masked card: cardholder name,
last four digits, expiry and brand.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into an order at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    cart_id = Identifier()
    customer_email = String(required=True, max_length=254)
    lines = Text(required=True)  # JSON: list of line snapshots
    line_count = Integer(required=True)
    subtotal = Float(required=True)
    tax = Float(required=True)
    total = Float(required=True)
    currency = String(default="USD")
    card_brand = String(max_length=20)
    card_last4 = String(max_length=4)
    created_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderTrackingAssigned:
    """The first read after shipment fixed the order's tracking data."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=20)
    estimated_delivery = String(required=True, max_length=10)
    assigned_at = DateTime(required=True)
