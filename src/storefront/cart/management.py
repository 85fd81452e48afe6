"""Cart management — opening the cart for a shopper session."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class OpenCart:
    """Load the session's cart, creating an empty one on first visit."""

    session_id = String(required=True, max_length=255)
    customer_id = Identifier()


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_session(command.session_id)
        if cart is not None:
            if command.customer_id and not cart.customer_id:
                cart.customer_id = command.customer_id
                repo.add(cart)
            return str(cart.id)

        cart = ShoppingCart.create(
            session_id=command.session_id,
            customer_id=command.customer_id,
        )
        repo.add(cart)
        return str(cart.id)
