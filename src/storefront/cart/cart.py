"""Shopping Cart aggregate — one per shopper session.

A cart is a set of lines keyed by (product_id, variant_key). Adding the same
product and variant again merges into the existing line; a line whose
quantity drops to zero or below is removed rather than kept. Monetary totals
are always derived from the lines, never stored.

Every persisted change bumps ``revision`` so a session holding an older copy
can detect that another session wrote the cart in the meantime.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.cart.pricing import subtotal_of, tax_on
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartLine:
    """One aggregated product + variant selection, priced when it was added."""

    product_id = Identifier(required=True)
    variant_key = String(max_length=50)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    display_name = String(required=True, max_length=255)
    image_ref = String(max_length=500)

    def matches(self, product_id, variant_key):
        return str(self.product_id) == str(product_id) and (self.variant_key or None) == (variant_key or None)

    def to_snapshot(self):
        """Plain-value copy of the line, decoupled from the live cart."""
        return {
            "product_id": str(self.product_id),
            "variant_key": self.variant_key,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "display_name": self.display_name,
            "image_ref": self.image_ref,
        }


@storefront.aggregate
class ShoppingCart:
    session_id = String(required=True, max_length=255)
    customer_id = Identifier()  # Set once the shopper signs in
    lines = HasMany(CartLine)
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def line_identities_must_be_unique(self):
        seen = set()
        for line in self.lines:
            key = (str(line.product_id), line.variant_key or None)
            if key in seen:
                raise ValidationError({"lines": [f"Duplicate cart line for {key[0]}"]})
            seen.add(key)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id, customer_id=None):
        now = datetime.now(UTC)
        return cls(
            session_id=session_id,
            customer_id=customer_id,
            revision=0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find_line(self, product_id, variant_key=None):
        return next((line for line in self.lines if line.matches(product_id, variant_key)), None)

    @property
    def item_count(self):
        return sum(line.quantity for line in self.lines)

    @property
    def subtotal(self):
        return subtotal_of(self.lines)

    @property
    def tax(self):
        return tax_on(self.subtotal)

    @property
    def total(self):
        return self.subtotal + self.tax

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price, display_name, variant_key=None, image_ref=None):
        """Add a selection, merging into the line with the same identity if there is one."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.find_line(product_id, variant_key)
        if existing:
            existing.quantity += quantity
            new_quantity = existing.quantity
            unit_price = existing.unit_price
        else:
            self.add_lines(
                CartLine(
                    product_id=product_id,
                    variant_key=variant_key,
                    unit_price=unit_price,
                    quantity=quantity,
                    display_name=display_name,
                    image_ref=image_ref,
                )
            )
            new_quantity = quantity

        self._touch()
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant_key=variant_key,
                quantity=quantity,
                new_quantity=new_quantity,
                unit_price=unit_price,
            )
        )

    def update_quantity(self, product_id, variant_key, new_quantity):
        """Replace a line's quantity; zero or less removes the line."""
        line = self.find_line(product_id, variant_key)
        if line is None:
            return

        if new_quantity <= 0:
            self.remove_item(product_id, variant_key)
            return

        previous_quantity = line.quantity
        line.quantity = new_quantity
        self._touch()
        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant_key=variant_key,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id, variant_key=None):
        line = self.find_line(product_id, variant_key)
        if line is None:
            return

        self.remove_lines(line)
        self._touch()
        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                variant_key=variant_key,
            )
        )

    def clear(self, order_id=None):
        """Empty the cart. ``order_id`` records the order that consumed the lines."""
        removed = list(self.lines)
        for line in removed:
            self.remove_lines(line)

        now = self._touch()
        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                lines_removed=len(removed),
                order_id=order_id,
                cleared_at=now,
            )
        )

    def _touch(self):
        now = datetime.now(UTC)
        self.revision = (self.revision or 0) + 1
        self.updated_at = now
        return now
