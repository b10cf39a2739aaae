from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from ..academics.repository import AcademicRepository
from ..common.datetime_utils import now_local
from ..common.money import to_money
from ..common.numbering import DocumentNumberGenerator
from ..common.pagination import Page, normalize_page
from ..common.validators import parse_enum, require_int
from ..core.constants import DEFAULT_PAYMENT_DUE_DAYS, DEFAULT_REGISTRATION_LOCK_TIMEOUT_SECONDS
from ..core.enums import PaymentDuration
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.connection import TransactionManager
from ..invoices.model import Invoice, InvoiceItem
from ..invoices.repository import InvoiceRepository
from ..payments.model import Payment
from ..payments.repository import PaymentRepository
from ..pricing.repository import PricingRepository
from ..pricing.service import additional_fee_for
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.model import SessionUser
from ..users.permissions import branch_scope, can_access_branch, ensure_branch_write
from .model import Registration, RegistrationFilter
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationDetails:
    registration: Registration
    student: Optional[Student]
    invoice: Optional[Invoice]
    invoice_items: Sequence[InvoiceItem]
    payments: Sequence[Payment]


def scoped_registration_filter(actor: SessionUser, filters: RegistrationFilter) -> RegistrationFilter:
    page, limit = normalize_page(filters.page, filters.limit)
    scope = branch_scope(actor)
    branch_id = filters.branch_id if scope is None else scope
    return replace(filters, branch_id=branch_id, page=page, limit=limit)


class RegistrationService:
    """Use case: open a registration with a fee snapshot and browse registrations."""

    def __init__(
        self,
        tx: TransactionManager,
        registrations: RegistrationRepository,
        students: StudentRepository,
        pricing: PricingRepository,
        academics: AcademicRepository,
        invoices: InvoiceRepository,
        payments: PaymentRepository,
        numbers: DocumentNumberGenerator,
        *,
        payment_due_days: int = DEFAULT_PAYMENT_DUE_DAYS,
        lock_timeout_seconds: int = DEFAULT_REGISTRATION_LOCK_TIMEOUT_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._tx = tx
        self._registrations = registrations
        self._students = students
        self._pricing = pricing
        self._academics = academics
        self._invoices = invoices
        self._payments = payments
        self._numbers = numbers
        self._payment_due_days = int(payment_due_days)
        self._lock_timeout_seconds = int(lock_timeout_seconds)
        self._clock = clock or now_local

    def create_registration(self, *, actor: SessionUser, student_id: Any, payment_duration: Any) -> Registration:
        if student_id in (None, "") or payment_duration in (None, ""):
            raise ValidationError("Student ID and payment duration are required")
        student_id = require_int(student_id, "studentId")
        duration = parse_enum(PaymentDuration, payment_duration, "paymentDuration")

        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        ensure_branch_write(actor, student.branch_id)

        year = self._academics.get_active_academic_year()
        if not year:
            raise ValidationError("No active academic year found")
        if self._registrations.find_for_student_year(student_id=student_id, academic_year_id=year.academic_year_id):
            raise ConflictError("Student already registered for this academic year")

        schema = self._pricing.get_active(branch_id=student.branch_id, grade_id=student.grade_id)
        if not schema:
            raise NotFoundError("Pricing schema not found for this branch and grade")

        # Fees are copied so later pricing edits never change this registration.
        registration_fee = to_money(schema.registration_fee)
        additional_fee = additional_fee_for(schema, duration)
        now = self._clock()

        with self._tx.transaction(lock_timeout_seconds=self._lock_timeout_seconds):
            registration_id = self._registrations.create(
                registration_number=self._numbers.next_registration_number(branch_id=student.branch_id),
                student_id=student.student_id,
                branch_id=student.branch_id,
                grade_id=student.grade_id,
                academic_year_id=year.academic_year_id,
                registration_fee=registration_fee,
                additional_fee=additional_fee,
                service_fee=to_money(schema.service_fee),
                total_amount=registration_fee + additional_fee,
                payment_duration=duration,
                payment_due_date=now + timedelta(days=self._payment_due_days),
                created_at=now,
            )

        registration = self._registrations.get_by_id(registration_id)
        logger.info(
            "Registration %s opened for student=%s (%s) by user=%s",
            registration.registration_number,
            student.student_id,
            duration.value,
            actor.user_id,
        )
        return registration

    def list_registrations(self, *, actor: SessionUser, filters: RegistrationFilter) -> Page[dict]:
        filters = scoped_registration_filter(actor, filters)
        rows, total = self._registrations.search(filters)
        return Page.build(rows, page=filters.page, limit=filters.limit, total=total)

    def get_registration_details(self, *, actor: SessionUser, registration_id: Any) -> RegistrationDetails:
        if registration_id in (None, ""):
            raise ValidationError("Registration ID is required")
        registration = self._registrations.get_by_id(require_int(registration_id, "registrationId"))
        if not registration or not can_access_branch(actor, registration.branch_id):
            raise NotFoundError("Registration not found")

        invoice = self._invoices.find_latest_for_registration(registration.registration_id)
        return RegistrationDetails(
            registration=registration,
            student=self._students.get_by_id(registration.student_id),
            invoice=invoice,
            invoice_items=self._invoices.list_items(invoice.invoice_id) if invoice else [],
            payments=self._payments.list_for_invoice(invoice.invoice_id) if invoice else [],
        )
