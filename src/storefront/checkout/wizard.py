"""The shipping → payment → review checkout workflow.

The wizard only moves forward when the current step's form is valid, may
always step back, and places the order from the review step. It holds the
raw form data for the duration of checkout; the card number and CVV are
handed to ``OrderLifecycle.create_order`` once and never leave the wizard
any other way (``summary`` shows the masked card only).
"""

from datetime import UTC, datetime
from enum import Enum

import structlog

from storefront.cart.store import CartStore
from storefront.checkout.cards import mask_card
from storefront.checkout.validation import PAYMENT_FIELDS, SHIPPING_FIELDS, validate_payment, validate_shipping
from storefront.order.lifecycle import OrderLifecycle
from storefront.order.order import DEFAULT_COUNTRY
from storefront.shared.results import PreconditionError, Result

logger = structlog.get_logger(__name__)


class CheckoutPhase(Enum):
    SHIPPING = "shipping"
    PAYMENT = "payment"
    REVIEW = "review"
    PLACED = "placed"


_NEXT_PHASE = {
    CheckoutPhase.SHIPPING: CheckoutPhase.PAYMENT,
    CheckoutPhase.PAYMENT: CheckoutPhase.REVIEW,
}
_PREVIOUS_PHASE = {
    CheckoutPhase.PAYMENT: CheckoutPhase.SHIPPING,
    CheckoutPhase.REVIEW: CheckoutPhase.PAYMENT,
}


class CheckoutWizard:
    def __init__(
        self,
        cart: CartStore,
        lifecycle: OrderLifecycle | None = None,
        clock=None,
        email: str | None = None,
    ) -> None:
        self.cart = cart
        self.lifecycle = lifecycle or OrderLifecycle(clock=clock)
        self._clock = clock or (lambda: datetime.now(UTC))
        self.phase = CheckoutPhase.SHIPPING
        self.shipping: dict = {field: "" for field in SHIPPING_FIELDS}
        self.shipping["country"] = DEFAULT_COUNTRY
        self.shipping["email"] = email or ""
        self.payment: dict = {field: "" for field in PAYMENT_FIELDS}
        self.errors: dict[str, list[str]] = {}
        self.order_id: str | None = None
        self._submitting = False
        self._log = logger.bind(cart_id=cart.cart_id)

    # -------------------------------------------------------------------
    # Form input
    # -------------------------------------------------------------------
    def update_shipping(self, **fields) -> None:
        self.shipping.update(_known(fields, SHIPPING_FIELDS))

    def update_payment(self, **fields) -> None:
        self.payment.update(_known(fields, PAYMENT_FIELDS))

    # -------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------
    def validate(self) -> dict[str, list[str]]:
        """Field errors for the current step; review and placed have none."""
        if self.phase == CheckoutPhase.SHIPPING:
            return validate_shipping(self.shipping)
        if self.phase == CheckoutPhase.PAYMENT:
            return validate_payment(self.payment, self._clock().year)
        return {}

    def advance(self) -> dict[str, list[str]]:
        """Move to the next step if the current one is valid.

        Returns the error map that blocked the move, empty when it moved.
        """
        if self.phase not in _NEXT_PHASE:
            return {}

        self.errors = self.validate()
        if not self.errors:
            self.phase = _NEXT_PHASE[self.phase]
        return self.errors

    def back(self) -> None:
        if self.phase in _PREVIOUS_PHASE:
            self.phase = _PREVIOUS_PHASE[self.phase]
            self.errors = {}

    def summary(self) -> dict:
        """What the review step shows: lines, totals, shipping and the masked card."""
        return {
            "lines": self.cart.lines,
            "item_count": self.cart.item_count(),
            "subtotal": self.cart.subtotal(),
            "tax": self.cart.tax(),
            "total": self.cart.total(),
            "shipping": dict(self.shipping),
            "payment": mask_card(self.payment),
        }

    # -------------------------------------------------------------------
    # Terminal action
    # -------------------------------------------------------------------
    def place_order(self) -> Result:
        if self._submitting:
            return Result.failure(PreconditionError("order placement already in progress"))
        if self.phase == CheckoutPhase.PLACED:
            return Result.failure(PreconditionError("order already placed"))
        if self.phase != CheckoutPhase.REVIEW:
            return Result.failure(PreconditionError("orders can only be placed from review"))
        if self.cart.is_empty:
            return Result.failure(PreconditionError("empty cart"))

        self._submitting = True
        try:
            result = self.lifecycle.create_order(self.cart, self.shipping, self.payment, now=self._clock())
        finally:
            self._submitting = False

        if not result.ok:
            self._log.info("Order placement failed", error=str(result.error))
            self.errors = result.field_errors
            return result

        self.order_id = result.value
        self.phase = CheckoutPhase.PLACED
        self.payment = {field: "" for field in PAYMENT_FIELDS}
        self.errors = {}
        self._log.info("Checkout complete", order_id=self.order_id)
        return result


def _known(fields: dict, allowed: tuple[str, ...]) -> dict:
    unknown = set(fields) - set(allowed)
    if unknown:
        raise TypeError(f"Unknown checkout fields: {', '.join(sorted(unknown))}")
    return fields
