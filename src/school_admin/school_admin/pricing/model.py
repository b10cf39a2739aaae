from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PaymentDuration


@dataclass(frozen=True)
class PricingSchema:
    pricing_id: int
    school_id: int
    branch_id: int
    grade_id: int
    registration_fee: Decimal
    monthly_fee: Decimal
    service_fee: Decimal
    is_active: bool = True
    branch_name: str = ""
    grade_name: str = ""
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class PaymentOption:
    duration: PaymentDuration
    label: str
    months: Decimal
    additional_fee: Decimal


@dataclass(frozen=True)
class PricingQuote:
    pricing_schema: PricingSchema
    payment_options: Sequence[PaymentOption]


# (duration, label, months) in display order.
PAYMENT_OPTION_TABLE = (
    (PaymentDuration.ONE_MONTH, "1 Month", Decimal("1")),
    (PaymentDuration.TWO_MONTHS, "2 Months", Decimal("2")),
    (PaymentDuration.QUARTER, "Quarter (2.5 Months)", Decimal("2.5")),
    (PaymentDuration.THREE_MONTHS, "3 Months", Decimal("3")),
    (PaymentDuration.FOUR_MONTHS, "4 Months", Decimal("4")),
    (PaymentDuration.FIVE_MONTHS, "5 Months", Decimal("5")),
    (PaymentDuration.TEN_MONTHS, "10 Months", Decimal("10")),
)

MONTHS_BY_DURATION = {duration: months for duration, _, months in PAYMENT_OPTION_TABLE}
