"""Pydantic request/response schemas for the storefront API.

These are the external contracts; the services behind them take plain
dicts and return ``Result`` objects.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1
    variant: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "quantity": 2,
                    "variant": "M",
                }
            ]
        }
    }


class UpdateQuantityRequest(BaseModel):
    quantity: int
    variant: str | None = None


class CartLineSchema(BaseModel):
    product_id: str
    variant_key: str | None = None
    display_name: str
    image_ref: str | None = None
    unit_price: float
    quantity: int


class CartResponse(BaseModel):
    cart_id: str
    session_id: str
    lines: list[CartLineSchema]
    item_count: int
    subtotal: float
    tax: float
    total: float


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class ShippingSchema(BaseModel):
    full_name: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


class PaymentSchema(BaseModel):
    cardholder_name: str = ""
    card_number: str = ""
    expiry_month: str = ""
    expiry_year: str = ""
    cvv: str = ""


class CheckoutRequest(BaseModel):
    shipping: ShippingSchema
    payment: PaymentSchema


class OrderIdResponse(BaseModel):
    order_id: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class TrackOrderRequest(BaseModel):
    order_id: str = Field(default="")
    email: str = Field(default="")
