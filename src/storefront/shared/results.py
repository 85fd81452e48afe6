"""Typed outcomes and the error taxonomy shared by every storefront service.

Aggregates and command handlers raise; the services that the presentation
layer talks to (CartStore, CheckoutWizard, OrderLifecycle, OrderLookup)
catch those exceptions and hand back a ``Result`` instead.

Field-scoped validation failures use ``protean.exceptions.ValidationError``
and unknown records use ``protean.exceptions.ObjectNotFoundError``; the
classes below cover the rest.
"""

from dataclasses import dataclass
from typing import Any

from protean.exceptions import ObjectNotFoundError, ValidationError


class StorefrontError(Exception):
    """Base class for storefront business errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PreconditionError(StorefrontError):
    """The operation is not allowed in the current state (e.g. empty cart)."""


class OwnershipMismatch(StorefrontError):
    """The order exists but does not belong to the supplied email or identity."""


class PersistenceError(StorefrontError):
    """The durable store failed to read or write."""


class StaleCartError(PersistenceError):
    """The cart changed in the store since this session last read it."""

    def __init__(self, cart_id: str, expected: int, actual: int) -> None:
        super().__init__(f"Cart {cart_id} is at revision {actual}, expected {expected}")
        self.cart_id = cart_id
        self.expected = expected
        self.actual = actual


@dataclass(frozen=True)
class Result:
    """Outcome of a storefront operation: either a value or an error."""

    value: Any = None
    error: Exception | None = None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Result":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def field_errors(self) -> dict:
        """Field → messages map when the failure is a validation error."""
        if isinstance(self.error, ValidationError):
            return dict(self.error.messages)
        return {}

    def unwrap(self) -> Any:
        """Return the value, re-raising the error for callers that want exceptions."""
        if self.error is not None:
            raise self.error
        return self.value


def is_unverifiable(error: Exception | None) -> bool:
    """True for lookup failures that must read the same to an end user."""
    return isinstance(error, (ObjectNotFoundError, OwnershipMismatch))
