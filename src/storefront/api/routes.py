"""FastAPI routes for the storefront — carts, checkout and order lookup."""

from fastapi import APIRouter, Header, HTTPException
from protean.exceptions import ValidationError

from storefront.api.schemas import (
    AddToCartRequest,
    CartResponse,
    CheckoutRequest,
    OrderIdResponse,
    TrackOrderRequest,
    UpdateQuantityRequest,
)
from storefront.cart.store import CartStore
from storefront.catalogue import get_catalogue
from storefront.checkout.wizard import CheckoutWizard
from storefront.order.lookup import OrderLookup
from storefront.order.views import OrderView
from storefront.shared.results import PersistenceError, PreconditionError, Result, StaleCartError, is_unverifiable

UNVERIFIED_ORDER = "We couldn't verify this order"


def _raise_for(result: Result) -> None:
    """Translate a failed Result into the matching HTTP error."""
    error = result.error
    if error is None:
        return
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=422, detail=result.field_errors)
    if is_unverifiable(error):
        raise HTTPException(status_code=404, detail=UNVERIFIED_ORDER)
    if isinstance(error, (PreconditionError, StaleCartError)):
        raise HTTPException(status_code=409, detail=error.message)
    if isinstance(error, PersistenceError):
        raise HTTPException(status_code=503, detail=error.message)
    raise HTTPException(status_code=500, detail=str(error))


def _advance_or_reject(wizard: CheckoutWizard) -> None:
    errors = wizard.advance()
    if errors:
        raise HTTPException(status_code=422, detail=errors)


def _cart_response(cart: CartStore) -> CartResponse:
    return CartResponse(
        cart_id=cart.cart_id,
        session_id=cart.session_id,
        lines=cart.lines,
        item_count=cart.item_count(),
        subtotal=cart.subtotal(),
        tax=cart.tax(),
        total=cart.total(),
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{session_id}", response_model=CartResponse)
async def get_cart(session_id: str) -> CartResponse:
    return _cart_response(CartStore.open(session_id))


@cart_router.post("/{session_id}/items", response_model=CartResponse)
async def add_cart_item(session_id: str, body: AddToCartRequest) -> CartResponse:
    product = get_catalogue().get_product(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {body.product_id} not found")

    cart = CartStore.open(session_id)
    _raise_for(cart.add_item(product, quantity=body.quantity, variant=body.variant))
    return _cart_response(cart)


@cart_router.put("/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item_quantity(session_id: str, product_id: str, body: UpdateQuantityRequest) -> CartResponse:
    cart = CartStore.open(session_id)
    _raise_for(cart.update_quantity(product_id, body.variant, body.quantity))
    return _cart_response(cart)


@cart_router.delete("/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(session_id: str, product_id: str, variant: str | None = None) -> CartResponse:
    cart = CartStore.open(session_id)
    _raise_for(cart.remove_item(product_id, variant))
    return _cart_response(cart)


@cart_router.post("/{session_id}/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout_cart(
    session_id: str,
    body: CheckoutRequest,
    x_customer_email: str | None = Header(default=None),
) -> OrderIdResponse:
    """Run the checkout wizard in one request.

    1. Shipping step (email defaults to the signed-in identity)
    2. Payment step
    3. Place the order from review
    """
    cart = CartStore.open(session_id)
    wizard = CheckoutWizard(cart, email=x_customer_email)

    wizard.update_shipping(**{field: value for field, value in body.shipping.model_dump().items() if value})
    _advance_or_reject(wizard)
    wizard.update_payment(**body.payment.model_dump())
    _advance_or_reject(wizard)

    result = wizard.place_order()
    _raise_for(result)
    return OrderIdResponse(order_id=result.value)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _require_identity(x_customer_email: str | None) -> str:
    if not x_customer_email:
        raise HTTPException(status_code=401, detail="Sign in to view your orders")
    return x_customer_email


@order_router.post("/track", response_model=OrderView)
async def track_order(body: TrackOrderRequest) -> OrderView:
    result = OrderLookup().track_order(body.order_id, body.email)
    _raise_for(result)
    return result.value


@order_router.get("", response_model=list[OrderView])
async def list_orders(
    status: str | None = None,
    q: str | None = None,
    x_customer_email: str | None = Header(default=None),
) -> list[OrderView]:
    result = OrderLookup().list_owned_orders(_require_identity(x_customer_email), status=status, query=q)
    _raise_for(result)
    return result.value


@order_router.get("/{order_id}", response_model=OrderView)
async def get_order(order_id: str, x_customer_email: str | None = Header(default=None)) -> OrderView:
    result = OrderLookup().get_owned_order(order_id, _require_identity(x_customer_email))
    _raise_for(result)
    return result.value
