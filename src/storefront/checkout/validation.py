"""Field validation for the checkout forms.

Each validator takes the raw form data and returns a field → messages map;
an empty map means the form may be submitted. Blank fields report that they
are required; filled-in fields that do not match their format report that
they are invalid.
"""

import re

from storefront.checkout.cards import normalize_card_number

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
ZIP_CODE_PATTERN = re.compile(r"\d{5}(-\d{4})?")
CARD_NUMBER_PATTERN = re.compile(r"\d{16}")
EXPIRY_MONTH_PATTERN = re.compile(r"0[1-9]|1[0-2]")
EXPIRY_YEAR_PATTERN = re.compile(r"\d{4}")
CVV_PATTERN = re.compile(r"\d{3,4}")

SHIPPING_FIELDS = ("full_name", "email", "address", "city", "state", "zip_code", "country")
PAYMENT_FIELDS = ("cardholder_name", "card_number", "expiry_month", "expiry_year", "cvv")
SHIPPING_MAX_LENGTHS = {
    "full_name": 255,
    "email": 254,
    "address": 255,
    "city": 100,
    "state": 100,
    "zip_code": 10,
    "country": 100,
}
SHIPPING_LABELS = {
    "full_name": "Full name",
    "email": "Email",
    "address": "Address",
    "city": "City",
    "state": "State",
    "zip_code": "ZIP Code",
    "country": "Country",
}


def _text(data, field):
    value = data.get(field)
    return str(value).strip() if value is not None else ""


def is_valid_email(value: str | None) -> bool:
    return bool(value) and EMAIL_PATTERN.fullmatch(value.strip()) is not None


def validate_shipping(data: dict) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}

    required = {
        "full_name": "Full name is required",
        "address": "Address is required",
        "city": "City is required",
        "state": "State is required",
    }
    for field, message in required.items():
        if not _text(data, field):
            errors[field] = [message]

    email = _text(data, "email")
    if not email:
        errors["email"] = ["Email is required"]
    elif not is_valid_email(email):
        errors["email"] = ["Email is invalid"]

    zip_code = _text(data, "zip_code")
    if not zip_code:
        errors["zip_code"] = ["ZIP Code is required"]
    elif not ZIP_CODE_PATTERN.fullmatch(zip_code):
        errors["zip_code"] = ["ZIP Code is invalid"]

    for field, limit in SHIPPING_MAX_LENGTHS.items():
        if field not in errors and len(_text(data, field)) > limit:
            errors[field] = [f"{SHIPPING_LABELS[field]} must be at most {limit} characters"]

    return errors


def validate_payment(data: dict, current_year: int) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}

    if not _text(data, "cardholder_name"):
        errors["cardholder_name"] = ["Name on card is required"]

    card_number = _text(data, "card_number")
    if not card_number:
        errors["card_number"] = ["Card number is required"]
    elif not CARD_NUMBER_PATTERN.fullmatch(normalize_card_number(card_number)):
        errors["card_number"] = ["Card number must be 16 digits"]

    month = _text(data, "expiry_month")
    if not month:
        errors["expiry_month"] = ["Month is required"]
    elif not EXPIRY_MONTH_PATTERN.fullmatch(month):
        errors["expiry_month"] = ["Invalid month"]

    year = _text(data, "expiry_year")
    if not year:
        errors["expiry_year"] = ["Year is required"]
    elif not EXPIRY_YEAR_PATTERN.fullmatch(year) or int(year) < current_year:
        errors["expiry_year"] = ["Invalid year"]

    cvv = _text(data, "cvv")
    if not cvv:
        errors["cvv"] = ["CVV is required"]
    elif not CVV_PATTERN.fullmatch(cvv):
        errors["cvv"] = ["CVV must be 3 or 4 digits"]

    return errors
