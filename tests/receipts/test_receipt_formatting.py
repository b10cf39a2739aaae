from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.school_admin.school_admin.core.enums import PaymentDuration
from src.school_admin.school_admin.receipts.formatting import calculate_penalty_fee, format_payment_duration

DUE = datetime(2026, 3, 8, 8, 0, 0)


@pytest.mark.parametrize(
    "paid_at, expected",
    [
        (datetime(2026, 3, 7, 8, 0, 0), "0"),
        (DUE, "0"),
        (datetime(2026, 3, 9, 8, 0, 0), "50"),
        (datetime(2026, 3, 15, 8, 0, 0), "50"),
        (datetime(2026, 3, 16, 8, 0, 0), "75"),
        (datetime(2026, 3, 23, 8, 0, 0), "100"),
    ],
)
def test_penalty_fee(paid_at, expected):
    assert calculate_penalty_fee(DUE, paid_at) == Decimal(expected)


def test_penalty_accepts_dates():
    assert calculate_penalty_fee(date(2026, 3, 1), date(2026, 3, 2)) == Decimal("50")


@pytest.mark.parametrize(
    "duration, registered_at, expected",
    [
        (PaymentDuration.ONE_MONTH, date(2026, 3, 1), "March"),
        (PaymentDuration.TWO_MONTHS, date(2026, 11, 5), "Nov and Dec"),
        (PaymentDuration.TWO_MONTHS, date(2026, 12, 5), "Dec and Jan"),
        (PaymentDuration.QUARTER, date(2026, 2, 10), "First Quarter"),
        (PaymentDuration.QUARTER, date(2026, 10, 1), "Fourth Quarter"),
        (PaymentDuration.THREE_MONTHS, date(2026, 11, 1), "Nov, Dec, Jan"),
        (PaymentDuration.FIVE_MONTHS, date(2026, 9, 1), "Sep, Oct, Nov, Dec, Jan"),
        (PaymentDuration.TEN_MONTHS, date(2026, 9, 1), "Academic Year (10 months)"),
    ],
)
def test_payment_duration_labels(duration, registered_at, expected):
    assert format_payment_duration(duration, registered_at) == expected
