"""Card number handling for checkout payment capture.

The full card number and CVV only ever exist in the wizard's form data and
for the duration of validation. What an order keeps is produced by
``mask_card``: cardholder name, last four digits, expiry and brand.
"""

import re
from enum import Enum

_WHITESPACE = re.compile(r"\s+")


class CardBrand(Enum):
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    AMEX = "Amex"
    UNKNOWN = "Unknown"


# Ordered: first matching prefix wins.
_BRAND_PREFIXES = (
    (re.compile(r"4"), CardBrand.VISA),
    (re.compile(r"5[1-5]"), CardBrand.MASTERCARD),
    (re.compile(r"3[47]"), CardBrand.AMEX),
)


def normalize_card_number(card_number: str | None) -> str:
    return _WHITESPACE.sub("", card_number or "")


def detect_brand(card_number: str | None) -> CardBrand:
    digits = normalize_card_number(card_number)
    return next((brand for prefix, brand in _BRAND_PREFIXES if prefix.match(digits)), CardBrand.UNKNOWN)


def mask_card(payment: dict) -> dict:
    """Reduce captured payment input to the fields an order may keep."""
    digits = normalize_card_number(payment.get("card_number"))
    return {
        "cardholder_name": (payment.get("cardholder_name") or "").strip(),
        "last4": digits[-4:],
        "expiry_month": (payment.get("expiry_month") or "").strip(),
        "expiry_year": (payment.get("expiry_year") or "").strip(),
        "brand": detect_brand(digits).value,
    }
