from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Upper bound (exclusive) of a DECIMAL(12,2) column.
MONEY_LIMIT = Decimal("10000000000")


def to_money(value: Any) -> Decimal:
    """Quantize to 2 decimal places (currency), ``None`` becomes 0.00."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def apply_discount(amount: Decimal, percentage: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(final, discount)`` with ``final`` rounded and ``final + discount == amount``."""
    final = to_money(amount * (Decimal(100) - percentage) / Decimal(100))
    return final, amount - final
