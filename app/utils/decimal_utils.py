# app/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

TWOPLACES = Decimal("0.01")

def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def line_total(quantity: int, price_per_unit) -> Decimal:
    return to_decimal(to_decimal(price_per_unit) * quantity)


def quotation_totals(lines: Iterable[Tuple[int, Decimal]]) -> Tuple[Decimal, Decimal, Decimal]:
    """(subtotal, tax, total_value) for (quantity, price_per_unit) pairs.

    Tax is not computed on the stored totals; GST is kept as a rate for the
    printed quotation only.
    """
    subtotal = to_decimal(sum((line_total(q, p) for q, p in lines), Decimal("0")))
    tax = Decimal("0.00")
    return subtotal, tax, subtotal + tax
