from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..academics.repository import AcademicRepository
from ..common.datetime_utils import now_local
from ..common.pagination import Page
from ..common.validators import optional_int, require_int
from ..core.enums import RegistrationStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.connection import TransactionManager
from ..registrations.model import Registration, RegistrationFilter
from ..registrations.repository import RegistrationRepository
from ..registrations.service import scoped_registration_filter
from ..students.repository import StudentRepository
from ..users.model import SessionUser
from ..users.permissions import branch_scope, can_access_branch
from .model import EnrollmentOutcome, EnrollmentStats, UnenrollOutcome
from .repository import EnrollmentRepository

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Use case: turn a paid registration into a class enrollment, and back.

    The registration status is the state machine here:
    PAYMENT_COMPLETED -> ENROLLED on enroll, ENROLLED -> PAYMENT_COMPLETED on unenroll.
    """

    def __init__(
        self,
        tx: TransactionManager,
        registrations: RegistrationRepository,
        enrollments: EnrollmentRepository,
        students: StudentRepository,
        academics: AcademicRepository,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._tx = tx
        self._registrations = registrations
        self._enrollments = enrollments
        self._students = students
        self._academics = academics
        self._clock = clock or now_local

    def _get_registration(self, actor: SessionUser, registration_id: Any) -> Registration:
        registration = self._registrations.get_by_id(require_int(registration_id, "registrationId"))
        if not registration or not can_access_branch(actor, registration.branch_id):
            raise NotFoundError("Registration not found")
        return registration

    def create_enrollment(self, *, actor: SessionUser, registration_id: Any, class_id: Any) -> EnrollmentOutcome:
        if registration_id in (None, "") or class_id in (None, ""):
            raise ValidationError("Registration ID and class ID are required")

        registration = self._get_registration(actor, registration_id)
        if registration.status == RegistrationStatus.ENROLLED:
            raise ConflictError("Student already enrolled")
        if registration.status != RegistrationStatus.PAYMENT_COMPLETED:
            raise ConflictError("Registration payment not completed", status=registration.status.value)

        year = self._academics.get_active_academic_year()
        if not year:
            raise ValidationError("No active academic year found")

        klass = self._academics.get_class(require_int(class_id, "classId"))
        if not klass:
            raise NotFoundError("Class not found")
        if klass.branch_id != registration.branch_id:
            raise ValidationError("Class does not belong to the registration's branch")
        enrolled_count = self._enrollments.count_active_in_class(klass.class_id)
        if enrolled_count >= klass.capacity:
            raise ConflictError("Class is full", capacity=klass.capacity, enrolled=enrolled_count)
        if self._enrollments.get_active_for_student(registration.student_id):
            raise ConflictError("Student already has an active enrollment")

        now = self._clock()
        with self._tx.transaction():
            self._students.set_admission_date(registration.student_id, admitted_at=now)
            enrollment_id = self._enrollments.create(
                student_id=registration.student_id,
                class_id=klass.class_id,
                branch_id=registration.branch_id,
                academic_year_id=year.academic_year_id,
                enrollment_date=now,
            )
            if not self._registrations.mark_enrolled(
                registration_id=registration.registration_id,
                enrolled_at=now,
                enrolled_by_id=actor.user_id,
            ):
                raise ConflictError("Student already enrolled")

        logger.info(
            "Student %s enrolled in class=%s (registration %s) by user=%s",
            registration.student_id,
            klass.class_id,
            registration.registration_number,
            actor.user_id,
        )
        return EnrollmentOutcome(
            message="Student enrolled successfully",
            enrollment=self._enrollments.get_by_id(enrollment_id),
            registration=self._registrations.get_by_id(registration.registration_id),
        )

    def unenroll_student(self, *, actor: SessionUser, registration_id: Any) -> UnenrollOutcome:
        if registration_id in (None, ""):
            raise ValidationError("Registration ID is required")

        registration = self._get_registration(actor, registration_id)
        if registration.status != RegistrationStatus.ENROLLED:
            raise ConflictError("Student not enrolled", status=registration.status.value)

        with self._tx.transaction():
            active = self._enrollments.get_active_for_student(registration.student_id)
            if active:
                self._enrollments.deactivate(active.enrollment_id)
            if not self._registrations.revert_enrollment(registration_id=registration.registration_id):
                raise ConflictError("Student not enrolled")

        logger.info(
            "Student %s unenrolled (registration %s) by user=%s",
            registration.student_id,
            registration.registration_number,
            actor.user_id,
        )
        return UnenrollOutcome(
            message="Student unenrolled successfully",
            registration=self._registrations.get_by_id(registration.registration_id),
        )

    def list_registrations(self, *, actor: SessionUser, filters: RegistrationFilter) -> Page[dict]:
        filters = scoped_registration_filter(actor, filters)
        rows, total = self._registrations.search(filters)
        return Page.build(rows, page=filters.page, limit=filters.limit, total=total)

    def get_stats(self, *, actor: SessionUser, branch_id: Any = None) -> EnrollmentStats:
        scope = branch_scope(actor)
        counts = self._registrations.count_by_status(
            branch_id=optional_int(branch_id, "branchId") if scope is None else scope
        )
        return EnrollmentStats(
            pending_payment=counts.get(RegistrationStatus.PENDING_PAYMENT, 0),
            ready_for_enrollment=counts.get(RegistrationStatus.PAYMENT_COMPLETED, 0),
            enrolled=counts.get(RegistrationStatus.ENROLLED, 0),
            total_registrations=sum(counts.values()),
        )

    def list_enrolled_students(self, *, actor: SessionUser, branch_id: Any = None, grade_id: Any = None) -> Sequence[dict]:
        scope = branch_scope(actor)
        return self._registrations.list_enrolled_students(
            branch_id=optional_int(branch_id, "branchId") if scope is None else scope,
            grade_id=optional_int(grade_id, "gradeId"),
        )
