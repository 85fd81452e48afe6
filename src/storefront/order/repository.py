"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def owned_by(self, email: str) -> list[Order]:
        """Orders whose shipping email matches, newest first."""
        orders = self._dao.query.filter(customer_email=email.strip().lower()).all().items
        return sorted(orders, key=lambda order: order.created_at, reverse=True)
