"""Reading orders back for the shopper who placed them.

Two entry points reach an order: the public tracking form, where the
shopper proves ownership with the shipping email, and the signed-in
account pages, where the identity's email does the same. Both go through
``_owned_view`` so the ownership rule and the status derivation cannot
diverge between them.

Unknown orders and orders that belong to someone else fail with different
error types; callers facing the public should present them identically
(see ``storefront.shared.results.is_unverifiable``).
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.checkout.validation import is_valid_email
from storefront.order.lifecycle import view_of
from storefront.order.order import Order
from storefront.order.status import OrderStatus
from storefront.order.views import OrderView
from storefront.shared.results import OwnershipMismatch, PersistenceError, Result

logger = structlog.get_logger(__name__)


class OrderLookup:
    def __init__(self, clock=None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def track_order(self, order_id: str, supplied_email: str, now: datetime | None = None) -> Result:
        errors = {}
        if not (order_id or "").strip():
            errors["order_id"] = ["Order ID is required"]
        if not (supplied_email or "").strip():
            errors["email"] = ["Email is required"]
        elif not is_valid_email(supplied_email):
            errors["email"] = ["Email is invalid"]
        if errors:
            return Result.failure(ValidationError(errors))

        return self._owned_view(order_id.strip(), supplied_email, now)

    def get_owned_order(self, order_id: str, identity_email: str | None, now: datetime | None = None) -> Result:
        return self._owned_view(order_id, identity_email, now)

    def list_owned_orders(
        self,
        identity_email: str | None,
        status: OrderStatus | str | None = None,
        query: str | None = None,
        now: datetime | None = None,
    ) -> Result:
        """The identity's orders, newest first.

        ``status`` keeps only orders in that derived status. ``query`` keeps
        only orders whose id or any item name contains it, ignoring case.
        """
        if not identity_email:
            return Result.failure(OwnershipMismatch("No identity to list orders for"))
        if status is not None and not isinstance(status, OrderStatus):
            try:
                status = OrderStatus(status)
            except ValueError:
                return Result.failure(ValidationError({"status": [f"Unknown status '{status}'"]}))

        now = now or self._clock()
        try:
            orders = current_domain.repository_for(Order).owned_by(identity_email)
            views = [view_of(order, now) for order in orders]
        except Exception as exc:
            logger.exception("Order history could not be read")
            return Result.failure(PersistenceError(f"Could not read order history: {exc}"))

        if status is not None:
            views = [view for view in views if view.status == status.value]
        if query and query.strip():
            views = [view for view in views if _matches(view, query.strip().lower())]
        return Result.success(views)

    def _owned_view(self, order_id: str, email: str | None, now: datetime | None) -> Result:
        try:
            order = current_domain.repository_for(Order).get(order_id)
        except ObjectNotFoundError as exc:
            logger.info("Order lookup for unknown order", order_id=order_id)
            return Result.failure(exc)
        except Exception as exc:
            logger.exception("Order could not be read", order_id=order_id)
            return Result.failure(PersistenceError(f"Could not read order {order_id}: {exc}"))

        if not order.is_owned_by(email):
            logger.info("Order lookup with non-matching email", order_id=order_id)
            return Result.failure(OwnershipMismatch(f"Order {order_id} could not be verified"))

        try:
            view = view_of(order, now or self._clock())
        except Exception as exc:
            logger.exception("Order could not be read", order_id=order_id)
            return Result.failure(PersistenceError(f"Could not read order {order_id}: {exc}"))
        return Result.success(view)


def _matches(view: OrderView, needle: str) -> bool:
    return needle in view.order_id.lower() or any(needle in line.display_name.lower() for line in view.lines)
