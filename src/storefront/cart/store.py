"""The shopper session's handle on its cart.

A CartStore is opened once per session and handed to whatever needs the
cart (views, the checkout wizard). It keeps the last persisted copy of the
cart for reads and turns each mutation into a cart command carrying the
revision it last saw, so every change is one atomic read-modify-write
against the store.

Mutations never raise for business-rule violations; they return a
``Result``. Listeners registered with ``on_change`` are called after every
successful mutation or refresh.
"""

from collections.abc import Callable

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import OpenCart
from storefront.catalogue.port import CatalogueProduct
from storefront.shared.results import PersistenceError, Result, StaleCartError

logger = structlog.get_logger(__name__)

Listener = Callable[["CartStore"], None]


class CartStore:
    def __init__(self, cart: ShoppingCart) -> None:
        self._cart = cart
        self._listeners: list[Listener] = []
        self._log = logger.bind(cart_id=str(cart.id), session_id=cart.session_id)

    # -------------------------------------------------------------------
    # Session start
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, session_id: str, customer_id: str | None = None) -> "CartStore":
        """Load the session's cart from the store, creating an empty one if needed."""
        cart_id = current_domain.process(
            OpenCart(session_id=session_id, customer_id=customer_id),
            asynchronous=False,
        )
        return cls(current_domain.repository_for(ShoppingCart).get(cart_id))

    # -------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------
    def on_change(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def off_change(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def cart_id(self) -> str:
        return str(self._cart.id)

    @property
    def session_id(self) -> str:
        return self._cart.session_id

    @property
    def revision(self) -> int:
        return self._cart.revision or 0

    @property
    def lines(self) -> list[dict]:
        """Snapshot of the lines in display order."""
        return [line.to_snapshot() for line in self._cart.lines]

    @property
    def is_empty(self) -> bool:
        return not self._cart.lines

    def item_count(self) -> int:
        return self._cart.item_count

    def subtotal(self) -> float:
        return self._cart.subtotal

    def tax(self) -> float:
        return self._cart.tax

    def total(self) -> float:
        return self._cart.total

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product: CatalogueProduct, quantity: int = 1, variant: str | None = None) -> Result:
        if product.requires_variant and not variant:
            return Result.failure(ValidationError({"variant": ["variant required"]}))
        if quantity is None or quantity < 1:
            return Result.failure(ValidationError({"quantity": ["Quantity must be at least 1"]}))

        return self._apply(
            AddToCart(
                cart_id=self.cart_id,
                expected_revision=self.revision,
                product_id=str(product.id),
                variant_key=variant,
                quantity=quantity,
                unit_price=product.unit_price,
                display_name=product.name,
                image_ref=product.image,
            )
        )

    def update_quantity(self, product_id: str, variant: str | None, new_quantity: int) -> Result:
        if self._cart.find_line(product_id, variant) is None:
            return Result.success(self)

        return self._apply(
            UpdateCartQuantity(
                cart_id=self.cart_id,
                expected_revision=self.revision,
                product_id=str(product_id),
                variant_key=variant,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, product_id: str, variant: str | None = None) -> Result:
        if self._cart.find_line(product_id, variant) is None:
            return Result.success(self)

        return self._apply(
            RemoveFromCart(
                cart_id=self.cart_id,
                expected_revision=self.revision,
                product_id=str(product_id),
                variant_key=variant,
            )
        )

    def clear(self) -> Result:
        if self.is_empty:
            return Result.success(self)

        return self._apply(ClearCart(cart_id=self.cart_id, expected_revision=self.revision))

    def refresh(self) -> Result:
        """Reload the cart from the store and notify listeners."""
        try:
            self._cart = current_domain.repository_for(ShoppingCart).get(self.cart_id)
        except ObjectNotFoundError as exc:
            return Result.failure(exc)
        except Exception as exc:
            self._log.exception("Cart reload failed")
            return Result.failure(PersistenceError(f"Could not load cart {self.cart_id}: {exc}"))

        self._notify()
        return Result.success(self)

    def _apply(self, command) -> Result:
        command_name = command.__class__.__name__
        try:
            current_domain.process(command, asynchronous=False)
        except ValidationError as exc:
            self._log.info("Cart change rejected", command=command_name, errors=exc.messages)
            return Result.failure(exc)
        except StaleCartError as exc:
            self._log.warning(
                "Cart changed elsewhere, reloading",
                command=command_name,
                expected_revision=exc.expected,
                actual_revision=exc.actual,
            )
            self.refresh()
            return Result.failure(exc)
        except Exception as exc:
            self._log.exception("Cart change could not be persisted", command=command_name)
            return Result.failure(PersistenceError(f"Could not save cart {self.cart_id}: {exc}"))

        reloaded = self.refresh()
        if not reloaded.ok:
            return reloaded

        self._log.debug("Cart changed", command=command_name, revision=self.revision, item_count=self.item_count())
        return Result.success(self)
