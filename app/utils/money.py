"""Fixed-point helpers for monetary values (2 fractional digits)."""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any

from app.core.exceptions import ValidationError

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest value a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")


def to_money(value: Any) -> Decimal:
    """
    Coerce a number, string or Decimal into a 2-place Decimal.

    Floats are converted through ``str`` so that values such as ``0.1``
    do not carry binary noise into the ledger.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def money_sum(values) -> Decimal:
    total = ZERO
    for value in values:
        total += to_money(value)
    return total
