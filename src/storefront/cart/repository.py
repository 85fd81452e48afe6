"""Repository for the ShoppingCart aggregate."""

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    """Carts are stored under their session key as well as their own id."""

    def for_session(self, session_id: str) -> ShoppingCart | None:
        """Find the cart stored for a shopper session."""
        carts = self._dao.query.filter(session_id=session_id).all().items
        return carts[0] if carts else None
