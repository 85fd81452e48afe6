"""Order aggregate — the immutable record of a placed cart.

An order is a by-value snapshot of the cart lines and prices at checkout,
the shipping details and the masked card. None of it changes after
creation. The only fields written later are the tracking number and the
estimated delivery date, which are fixed together the first time a read
finds the order shipped.

Status is not a field: see ``storefront.order.status``.
"""

import json
from datetime import UTC, datetime
from uuid import uuid4

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.cart.pricing import totals_of
from storefront.checkout.validation import SHIPPING_MAX_LENGTHS
from storefront.domain import storefront
from storefront.order.events import OrderPlaced, OrderTrackingAssigned
from storefront.order.status import DerivedStatus, derive_status

ORDER_ID_PREFIX = "ORD-"
DEFAULT_COUNTRY = "United States"


def new_order_id():
    return f"{ORDER_ID_PREFIX}{uuid4().hex[:12].upper()}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingInfo:
    """Where and to whom the order ships, as entered at checkout.

    The email doubles as the ownership key for order lookup.
    """

    full_name = String(required=True, max_length=SHIPPING_MAX_LENGTHS["full_name"])
    email = String(required=True, max_length=SHIPPING_MAX_LENGTHS["email"])
    address = String(required=True, max_length=SHIPPING_MAX_LENGTHS["address"])
    city = String(required=True, max_length=SHIPPING_MAX_LENGTHS["city"])
    state = String(required=True, max_length=SHIPPING_MAX_LENGTHS["state"])
    zip_code = String(required=True, max_length=SHIPPING_MAX_LENGTHS["zip_code"])
    country = String(max_length=SHIPPING_MAX_LENGTHS["country"], default=DEFAULT_COUNTRY)


@storefront.value_object(part_of="Order")
class PaymentCard:
    """The masked card an order was paid with. Never holds the card number or CVV."""

    cardholder_name = String(required=True, max_length=255)
    last4 = String(required=True, max_length=4)
    expiry_month = String(required=True, max_length=2)
    expiry_year = String(required=True, max_length=4)
    brand = String(max_length=20)

    @invariant.post
    def last4_must_be_four_digits(self):
        if not (self.last4 and len(self.last4) == 4 and self.last4.isdigit()):
            raise ValidationError({"last4": ["Must be the last four digits of the card"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A cart line frozen at checkout, immune to later catalogue changes."""

    product_id = Identifier(required=True)
    variant_key = String(max_length=50)
    display_name = String(required=True, max_length=255)
    image_ref = String(max_length=500)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)

    def to_snapshot(self):
        return {
            "product_id": str(self.product_id),
            "variant_key": self.variant_key,
            "display_name": self.display_name,
            "image_ref": self.image_ref,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_email = String(required=True, max_length=254)  # lower-cased shipping email
    lines = HasMany(OrderLine)
    subtotal = Float(required=True, min_value=0.0)
    tax = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="USD")
    shipping_info = ValueObject(ShippingInfo, required=True)
    payment_card = ValueObject(PaymentCard, required=True)
    tracking_number = String(max_length=20)
    estimated_delivery = String(max_length=10)  # ISO date string
    created_at = DateTime(required=True)

    @invariant.post
    def tracking_fields_are_assigned_together(self):
        if bool(self.tracking_number) != bool(self.estimated_delivery):
            raise ValidationError({"tracking_number": ["Tracking number and estimated delivery go together"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, line_snapshots, shipping_info, masked_card, created_at=None, cart_id=None):
        """Create an order from cart line snapshots.

        Totals are recomputed from the snapshots here; they are the source of
        truth for the order from now on.

        Args:
            line_snapshots: List of dicts with product_id, variant_key,
                            display_name, image_ref, unit_price, quantity.
            shipping_info: Dict with the ShippingInfo fields.
            masked_card: Dict with the PaymentCard fields.
            created_at: Placement time; defaults to now.
            cart_id: The cart the lines came from, recorded on the event.
        """
        if not line_snapshots:
            raise ValidationError({"lines": ["An order needs at least one line"]})

        created_at = created_at or datetime.now(UTC)
        lines = [OrderLine(**snapshot) for snapshot in line_snapshots]
        subtotal, tax, total = totals_of(lines)

        shipping = ShippingInfo(**{**shipping_info, "country": shipping_info.get("country") or DEFAULT_COUNTRY})
        card = PaymentCard(**masked_card)

        order = cls(
            id=new_order_id(),
            customer_email=shipping.email.strip().lower(),
            subtotal=subtotal,
            tax=tax,
            total=total,
            shipping_info=shipping,
            payment_card=card,
            created_at=created_at,
        )
        for line in lines:
            order.add_lines(line)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                cart_id=cart_id,
                customer_email=order.customer_email,
                lines=json.dumps([line.to_snapshot() for line in order.lines]),
                line_count=len(order.lines),
                subtotal=subtotal,
                tax=tax,
                total=total,
                currency=order.currency,
                card_brand=card.brand,
                card_last4=card.last4,
                created_at=created_at,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def status_at(self, now) -> DerivedStatus:
        """Derived status at ``now``, preferring tracking data already on the record."""
        derived = derive_status(self.created_at, now, order_id=str(self.id))
        if self.tracking_number and derived.status.has_shipped:
            return DerivedStatus(
                status=derived.status,
                tracking_number=self.tracking_number,
                estimated_delivery=self.estimated_delivery,
            )
        return derived

    def record_tracking(self, derived: DerivedStatus, now=None) -> bool:
        """Fix the tracking data the first time it is derived. Returns True if it changed."""
        if self.tracking_number or not derived.tracking_number:
            return False

        with atomic_change(self):
            self.tracking_number = derived.tracking_number
            self.estimated_delivery = derived.estimated_delivery

        self.raise_(
            OrderTrackingAssigned(
                order_id=str(self.id),
                tracking_number=self.tracking_number,
                estimated_delivery=self.estimated_delivery,
                assigned_at=now or datetime.now(UTC),
            )
        )
        return True

    def is_owned_by(self, email) -> bool:
        """Case-insensitive comparison against the shipping email."""
        if not email:
            return False
        return self.shipping_info.email.strip().lower() == str(email).strip().lower()
