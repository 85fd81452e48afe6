"""Read views of an order, as handed to the presentation layer.

A view is built fresh on every read and always carries the status derived
for the moment of the read.
"""

from datetime import datetime

from pydantic import BaseModel

from storefront.order.status import DerivedStatus


class OrderLineView(BaseModel):
    product_id: str
    variant_key: str | None = None
    display_name: str
    image_ref: str | None = None
    unit_price: float
    quantity: int
    line_total: float


class ShippingInfoView(BaseModel):
    full_name: str
    email: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str


class PaymentCardView(BaseModel):
    cardholder_name: str
    last4: str
    expiry_month: str
    expiry_year: str
    brand: str | None = None


class OrderView(BaseModel):
    order_id: str
    created_at: datetime
    status: str
    tracking_number: str | None = None
    estimated_delivery: str | None = None
    lines: list[OrderLineView]
    item_count: int
    subtotal: float
    tax: float
    total: float
    currency: str
    shipping_info: ShippingInfoView
    payment_card: PaymentCardView

    @classmethod
    def build(cls, order, derived: DerivedStatus) -> "OrderView":
        shipping = order.shipping_info
        card = order.payment_card
        return cls(
            order_id=str(order.id),
            created_at=order.created_at,
            status=derived.status.value,
            tracking_number=derived.tracking_number,
            estimated_delivery=derived.estimated_delivery,
            lines=[
                OrderLineView(
                    product_id=str(line.product_id),
                    variant_key=line.variant_key,
                    display_name=line.display_name,
                    image_ref=line.image_ref,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    line_total=line.unit_price * line.quantity,
                )
                for line in order.lines
            ],
            item_count=sum(line.quantity for line in order.lines),
            subtotal=order.subtotal,
            tax=order.tax,
            total=order.total,
            currency=order.currency,
            shipping_info=ShippingInfoView(
                full_name=shipping.full_name,
                email=shipping.email,
                address=shipping.address,
                city=shipping.city,
                state=shipping.state,
                zip_code=shipping.zip_code,
                country=shipping.country,
            ),
            payment_card=PaymentCardView(
                cardholder_name=card.cardholder_name,
                last4=card.last4,
                expiry_month=card.expiry_month,
                expiry_year=card.expiry_year,
                brand=card.brand,
            ),
        )
