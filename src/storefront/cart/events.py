"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, as a new line or merged into an existing one."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_key = String(max_length=50)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    unit_price = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was replaced."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_key = String(max_length=50)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_key = String(max_length=50)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """Every line was removed, either by the shopper or by placing an order."""

    __version__ = 1

    cart_id = Identifier(required=True)
    lines_removed = Integer(required=True)
    order_id = Identifier()
    cleared_at = DateTime(required=True)
