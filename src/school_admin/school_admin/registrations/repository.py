from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Protocol, Sequence, Tuple

from ..core.enums import PaymentDuration, RegistrationStatus
from .model import Registration, RegistrationFilter


class RegistrationRepository(Protocol):
    def get_by_id(self, registration_id: int) -> Optional[Registration]:
        raise NotImplementedError

    def find_for_student_year(self, *, student_id: int, academic_year_id: int) -> Optional[Registration]:
        raise NotImplementedError

    def find_pending_for_student(self, *, student_id: int) -> Optional[Registration]:
        raise NotImplementedError

    def create(
        self,
        *,
        registration_number: str,
        student_id: int,
        branch_id: int,
        grade_id: int,
        academic_year_id: int,
        registration_fee: Decimal,
        additional_fee: Decimal,
        service_fee: Decimal,
        total_amount: Decimal,
        payment_duration: PaymentDuration,
        payment_due_date: datetime,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    # Status transitions. Each one only applies while the row is still in the
    # expected source status and returns False otherwise.
    def record_payment(
        self,
        *,
        registration_id: int,
        status: RegistrationStatus,
        paid_amount: Decimal,
        discount_percentage: Decimal,
        discount_amount: Decimal,
        completed_at: Optional[datetime],
    ) -> bool:
        raise NotImplementedError

    def mark_payment_completed(self, *, registration_id: int, paid_amount: Decimal, completed_at: datetime) -> bool:
        raise NotImplementedError

    def mark_enrolled(self, *, registration_id: int, enrolled_at: datetime, enrolled_by_id: int) -> bool:
        raise NotImplementedError

    def revert_enrollment(self, *, registration_id: int) -> bool:
        raise NotImplementedError

    # Read side
    def search(self, filters: RegistrationFilter) -> Tuple[Sequence[dict], int]:
        """Return UI rows (joined with student/grade) for one page plus the total count."""

        raise NotImplementedError

    def count_by_status(self, *, branch_id: Optional[int] = None) -> Dict[RegistrationStatus, int]:
        raise NotImplementedError

    def list_enrolled_students(self, *, branch_id: Optional[int] = None, grade_id: Optional[int] = None) -> Sequence[dict]:
        raise NotImplementedError
