"""Display helpers for receipts: payment period labels and late penalties."""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Union

from ..common.datetime_utils import as_datetime
from ..core.constants import PENALTY_FIRST_WEEK, PENALTY_PER_EXTRA_WEEK
from ..core.enums import PaymentDuration

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
MONTH_ABBR = tuple(name[:3] for name in MONTH_NAMES)
QUARTER_NAMES = ("First Quarter", "Second Quarter", "Third Quarter", "Fourth Quarter")

_MONTH_SPANS = {
    PaymentDuration.THREE_MONTHS: 3,
    PaymentDuration.FOUR_MONTHS: 4,
    PaymentDuration.FIVE_MONTHS: 5,
}

SECONDS_PER_DAY = 86400


def _consecutive_months(start_month: int, count: int) -> list[str]:
    # start_month is 1-based; wraps December -> January.
    return [MONTH_ABBR[(start_month - 1 + i) % 12] for i in range(count)]


def format_payment_duration(duration: PaymentDuration, registered_at: Union[date, datetime]) -> str:
    """Human label for the period a payment covers, anchored at the registration month.

    Quarters are fixed calendar quarters (Jan-Mar, Apr-Jun, ...), not rolling ones.
    """
    month = registered_at.month

    if duration == PaymentDuration.ONE_MONTH:
        return MONTH_NAMES[month - 1]
    if duration == PaymentDuration.TWO_MONTHS:
        first, second = _consecutive_months(month, 2)
        return f"{first} and {second}"
    if duration == PaymentDuration.QUARTER:
        return QUARTER_NAMES[(month - 1) // 3]
    if duration in _MONTH_SPANS:
        return ", ".join(_consecutive_months(month, _MONTH_SPANS[duration]))
    if duration == PaymentDuration.TEN_MONTHS:
        return "Academic Year (10 months)"
    return duration.value


def calculate_penalty_fee(due_date: Union[date, datetime], paid_at: Union[date, datetime]) -> Decimal:
    """Late fee: 0 if paid on or before the due date.

    Otherwise a flat first-week amount plus a fixed amount for every further
    started week: ``50 + max(0, weeks_late - 1) * 25``.
    """
    due = as_datetime(due_date)
    paid = as_datetime(paid_at)
    if paid <= due:
        return Decimal("0")

    days_late = math.ceil((paid - due).total_seconds() / SECONDS_PER_DAY)
    weeks_late = math.ceil(days_late / 7)
    return PENALTY_FIRST_WEEK + max(0, weeks_late - 1) * PENALTY_PER_EXTRA_WEEK
