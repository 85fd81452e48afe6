"""Cart line management — commands and handler.

Every command carries the cart revision the session last observed. The
handler reloads the cart, refuses to apply the change if another session
wrote it in between, and otherwise applies and persists it in one unit of
work.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.shared.results import StaleCartError


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    expected_revision = Integer(required=True)
    product_id = Identifier(required=True)
    variant_key = String(max_length=50)
    quantity = Integer(required=True)
    unit_price = Float(required=True, min_value=0.0)
    display_name = String(required=True, max_length=255)
    image_ref = String(max_length=500)


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    cart_id = Identifier(required=True)
    expected_revision = Integer(required=True)
    product_id = Identifier(required=True)
    variant_key = String(max_length=50)
    new_quantity = Integer(required=True)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    expected_revision = Integer(required=True)
    product_id = Identifier(required=True)
    variant_key = String(max_length=50)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)
    expected_revision = Integer(required=True)


def load_for_update(cart_id, expected_revision):
    """Fetch the cart and check it is still at the revision the caller saw."""
    repo = current_domain.repository_for(ShoppingCart)
    cart = repo.get(cart_id)
    actual = cart.revision or 0
    if actual != expected_revision:
        raise StaleCartError(str(cart_id), expected_revision, actual)
    return repo, cart


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartLinesHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo, cart = load_for_update(command.cart_id, command.expected_revision)
        cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            unit_price=command.unit_price,
            display_name=command.display_name,
            variant_key=command.variant_key,
            image_ref=command.image_ref,
        )
        repo.add(cart)
        return cart.revision

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo, cart = load_for_update(command.cart_id, command.expected_revision)
        cart.update_quantity(
            product_id=command.product_id,
            variant_key=command.variant_key,
            new_quantity=command.new_quantity,
        )
        repo.add(cart)
        return cart.revision

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo, cart = load_for_update(command.cart_id, command.expected_revision)
        cart.remove_item(product_id=command.product_id, variant_key=command.variant_key)
        repo.add(cart)
        return cart.revision

    @handle(ClearCart)
    def clear_cart(self, command):
        repo, cart = load_for_update(command.cart_id, command.expected_revision)
        cart.clear()
        repo.add(cart)
        return cart.revision
