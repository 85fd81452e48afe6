"""OrderLifecycle: turns a reviewed cart into an order and reads orders back.

``create_order`` is the only way an order comes into existence. It guards
its inputs once more, masks the card before anything is handed to the
domain, and dispatches a single ``PlaceOrder`` command so the order insert
and the cart clear commit together.
"""

import json
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.store import CartStore
from storefront.checkout.cards import mask_card
from storefront.checkout.validation import SHIPPING_FIELDS, validate_payment, validate_shipping
from storefront.order.order import DEFAULT_COUNTRY, Order
from storefront.order.placement import PlaceOrder
from storefront.order.status import derive_status
from storefront.order.views import OrderView
from storefront.shared.results import PersistenceError, PreconditionError, Result, StaleCartError

logger = structlog.get_logger(__name__)

__all__ = ["OrderLifecycle", "derive_status", "view_of"]


def view_of(order: Order, now: datetime) -> OrderView:
    """Build the view of ``order`` with the status derived for ``now``.

    The first read that finds the order shipped or delivered fixes its
    tracking data on the record.
    """
    repo = current_domain.repository_for(Order)
    derived = order.status_at(now)
    if order.record_tracking(derived, now):
        repo.add(order)
        logger.info(
            "Tracking assigned",
            order_id=str(order.id),
            tracking_number=order.tracking_number,
            estimated_delivery=order.estimated_delivery,
        )
    return OrderView.build(order, derived)


def _shipping_record(shipping_info: dict) -> dict:
    record = {field: str(shipping_info.get(field) or "").strip() for field in SHIPPING_FIELDS}
    record["country"] = record["country"] or DEFAULT_COUNTRY
    return record


class OrderLifecycle:
    def __init__(self, clock=None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def create_order(
        self,
        cart: CartStore,
        shipping_info: dict,
        payment_input: dict,
        now: datetime | None = None,
    ) -> Result:
        """Snapshot ``cart`` into a new order and empty the cart.

        Returns the new order id on success. Nothing is written unless both
        the order and the cleared cart can be stored.
        """
        now = now or self._clock()
        log = logger.bind(cart_id=cart.cart_id)

        if cart.is_empty:
            return Result.failure(PreconditionError("empty cart"))

        errors = {**validate_shipping(shipping_info), **validate_payment(payment_input, now.year)}
        if errors:
            log.info("Order input rejected", fields=sorted(errors))
            return Result.failure(ValidationError(errors))

        command = PlaceOrder(
            cart_id=cart.cart_id,
            expected_revision=cart.revision,
            shipping_info=json.dumps(_shipping_record(shipping_info)),
            payment_card=json.dumps(mask_card(payment_input)),
            placed_at=now,
        )
        try:
            order_id = current_domain.process(command, asynchronous=False)
        except (ValidationError, PreconditionError) as exc:
            log.info("Order placement rejected", error=str(exc))
            return Result.failure(exc)
        except StaleCartError as exc:
            log.warning("Cart changed before the order was placed", expected=exc.expected, actual=exc.actual)
            cart.refresh()
            return Result.failure(exc)
        except Exception as exc:
            log.exception("Order could not be persisted")
            return Result.failure(PersistenceError(f"Could not place order for cart {cart.cart_id}: {exc}"))

        cart.refresh()
        return Result.success(order_id)

    def get_order(self, order_id: str, now: datetime | None = None) -> Result:
        try:
            order = current_domain.repository_for(Order).get(order_id)
            view = view_of(order, now or self._clock())
        except ObjectNotFoundError as exc:
            return Result.failure(exc)
        except Exception as exc:
            logger.exception("Order could not be read", order_id=order_id)
            return Result.failure(PersistenceError(f"Could not read order {order_id}: {exc}"))
        return Result.success(view)
