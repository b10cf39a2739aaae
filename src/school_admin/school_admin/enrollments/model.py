from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import EnrollmentStatus
from ..registrations.model import Registration


@dataclass(frozen=True)
class Enrollment:
    enrollment_id: int
    student_id: int
    class_id: int
    branch_id: int
    academic_year_id: int
    enrollment_date: datetime
    status: EnrollmentStatus


@dataclass(frozen=True)
class EnrollmentOutcome:
    message: str
    enrollment: Enrollment
    registration: Registration


@dataclass(frozen=True)
class UnenrollOutcome:
    message: str
    registration: Registration


@dataclass(frozen=True)
class EnrollmentStats:
    pending_payment: int
    ready_for_enrollment: int
    enrolled: int
    total_registrations: int
