"""Order status derivation as a pure function of creation time and "now".

Status is never stored. Every read recomputes it from the elapsed time since
the order was placed, so it cannot drift from the rule and needs no
background job:

    elapsed < 48h           → processing
    48h <= elapsed < 120h   → shipped
    elapsed >= 120h         → delivered

A negative elapsed time (clock skew between writer and reader) reads as
processing. Tracking data is derived from the order id alone, so deriving it
twice always yields the same number.
"""

import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

SHIPPED_AFTER = timedelta(hours=48)
DELIVERED_AFTER = timedelta(hours=120)
DELIVERY_WINDOW = timedelta(days=5)

TRACKING_PREFIX = "TRK-"
_TRACKING_DIGITS = 10


class OrderStatus(Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"

    @property
    def rank(self) -> int:
        return _STATUS_SEQUENCE.index(self)

    @property
    def has_shipped(self) -> bool:
        return self in (OrderStatus.SHIPPED, OrderStatus.DELIVERED)


_STATUS_SEQUENCE = (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED)


@dataclass(frozen=True)
class DerivedStatus:
    status: OrderStatus
    tracking_number: str | None = None
    estimated_delivery: str | None = None  # ISO date


def status_at(created_at: datetime, now: datetime) -> OrderStatus:
    elapsed = now - created_at
    if elapsed >= DELIVERED_AFTER:
        return OrderStatus.DELIVERED
    if elapsed >= SHIPPED_AFTER:
        return OrderStatus.SHIPPED
    return OrderStatus.PROCESSING


def tracking_number_for(order_id: str) -> str:
    digest = hashlib.sha256(str(order_id).encode("utf-8")).hexdigest()
    return f"{TRACKING_PREFIX}{int(digest, 16) % 10**_TRACKING_DIGITS:0{_TRACKING_DIGITS}d}"


def estimated_delivery_for(created_at: datetime) -> str:
    return (created_at + DELIVERY_WINDOW).date().isoformat()


def derive_status(created_at: datetime, now: datetime, order_id: str | None = None) -> DerivedStatus:
    """Status of an order placed at ``created_at`` as seen at ``now``.

    Once the order has shipped, and when ``order_id`` is given, the result
    also carries the deterministic tracking number and estimated delivery
    date for that order.
    """
    status = status_at(created_at, now)
    if order_id is None or not status.has_shipped:
        return DerivedStatus(status=status)

    return DerivedStatus(
        status=status,
        tracking_number=tracking_number_for(order_id),
        estimated_delivery=estimated_delivery_for(created_at),
    )
