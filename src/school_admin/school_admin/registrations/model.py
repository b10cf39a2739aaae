from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentDuration, RegistrationStatus


@dataclass(frozen=True)
class Registration:
    """A student's fee obligation for one academic year.

    Fee fields are a snapshot of the pricing schema taken at registration time.
    """

    registration_id: int
    registration_number: str
    student_id: int
    branch_id: int
    grade_id: int
    academic_year_id: int
    status: RegistrationStatus
    registration_fee: Decimal
    additional_fee: Decimal
    service_fee: Decimal
    total_amount: Decimal
    payment_duration: PaymentDuration
    payment_due_date: datetime
    created_at: datetime
    discount_percentage: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    completed_at: Optional[datetime] = None
    enrolled_at: Optional[datetime] = None
    enrolled_by_id: Optional[int] = None


@dataclass(frozen=True)
class RegistrationFilter:
    branch_id: Optional[int] = None
    grade_id: Optional[int] = None
    status: Optional[RegistrationStatus] = None
    payment_duration: Optional[PaymentDuration] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = 10
