import pytest

from storefront.cart.store import CartStore
from storefront.catalogue import CatalogueProduct

SHIPPING = {
    "full_name": "Ada Lovelace",
    "email": "ada@example.com",
    "address": "12 Analytical Way",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62704",
}

PAYMENT = {
    "cardholder_name": "Ada Lovelace",
    "card_number": "4242 4242 4242 4242",
    "expiry_month": "09",
    "expiry_year": "2030",
    "cvv": "123",
}


@pytest.fixture()
def mug():
    return CatalogueProduct(id="prod-mug", name="Enamel Mug", price=99.99, image="mug.jpg")


@pytest.fixture()
def tee():
    return CatalogueProduct(id="prod-tee", name="Logo Tee", price=25.0, sale_price=20.0, variants=("S", "M", "L"))


@pytest.fixture()
def cart():
    return CartStore.open("sess-001")


@pytest.fixture()
def filled_cart(cart, mug):
    cart.add_item(mug, quantity=2).unwrap()
    return cart


@pytest.fixture()
def shipping():
    return dict(SHIPPING)


@pytest.fixture()
def payment():
    return dict(PAYMENT)
