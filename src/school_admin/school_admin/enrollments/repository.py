from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import Enrollment


class EnrollmentRepository(Protocol):
    def get_by_id(self, enrollment_id: int) -> Optional[Enrollment]:
        raise NotImplementedError

    def get_active_for_student(self, student_id: int) -> Optional[Enrollment]:
        raise NotImplementedError

    def count_active_in_class(self, class_id: int) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        student_id: int,
        class_id: int,
        branch_id: int,
        academic_year_id: int,
        enrollment_date: datetime,
    ) -> int:
        """Insert an ACTIVE enrollment."""

        raise NotImplementedError

    def deactivate(self, enrollment_id: int) -> bool:
        """ACTIVE -> INACTIVE; False if it was not active."""

        raise NotImplementedError
