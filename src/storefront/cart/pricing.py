"""Cart money arithmetic shared by the live cart and the order snapshot."""

from decimal import ROUND_HALF_UP, Decimal

TAX_RATE = 0.08

_CENT = Decimal("0.01")


def round2(amount: float) -> float:
    """Round half-up to cents, the way a receipt shows it."""
    return float(Decimal(repr(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def subtotal_of(lines) -> float:
    """Sum of unit price × quantity over anything shaped like a cart line."""
    return sum((line.unit_price * line.quantity for line in lines), 0.0)


def tax_on(subtotal: float) -> float:
    return round2(subtotal * TAX_RATE)


def totals_of(lines) -> tuple[float, float, float]:
    """(subtotal, tax, total) for the given lines."""
    subtotal = subtotal_of(lines)
    tax = tax_on(subtotal)
    return subtotal, tax, subtotal + tax
