from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from functools import partial
from typing import Any, Callable, List, Optional, Tuple

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.money import apply_discount, to_money
from ..common.numbering import DocumentNumberGenerator
from ..common.validators import optional_decimal, optional_money, parse_enum, require_int
from ..core.constants import (
    DEFAULT_SCHOOL_NAME,
    FEE_TYPE_REGISTRATION,
    FEE_TYPE_TUITION,
    INVOICE_PREFIX,
    PAYMENT_PREFIX,
)
from ..core.enums import (
    InvoiceStatus,
    PaymentDuration,
    PaymentMethod,
    PaymentStatus,
    RegistrationStatus,
)
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.connection import TransactionManager
from ..invoices.repository import InvoiceRepository
from ..notifications.sms import SmsSender, enrollment_ready_message, payment_link, payment_link_message
from ..registrations.model import Registration
from ..registrations.repository import RegistrationRepository
from ..students.repository import StudentRepository
from ..users.model import SessionUser
from ..users.permissions import can_access_branch, ensure_branch_write
from .model import ConfirmationOutcome, PaymentOutcome
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


def additional_fee_description(duration: PaymentDuration) -> str:
    if duration == PaymentDuration.QUARTER:
        return "Quarterly Fee (2.5 Months)"
    if duration == PaymentDuration.ONE_MONTH:
        return "Monthly Fee (1st & Last Month)"
    if duration == PaymentDuration.TEN_MONTHS:
        return "Tuition Fee (10 Months)"
    return f"Tuition Fee ({duration.value.replace('_', ' ').title()})"


def invoice_lines(registration: Registration) -> List[Tuple[str, str, str, Decimal]]:
    """(fee type code, fee type name, description, amount) for each billed line."""
    lines = []
    if registration.registration_fee > 0:
        lines.append((FEE_TYPE_REGISTRATION, "Registration Fee", "Registration Fee", registration.registration_fee))
    if registration.additional_fee > 0:
        lines.append(
            (
                FEE_TYPE_TUITION,
                "Tuition Fee",
                additional_fee_description(registration.payment_duration),
                registration.additional_fee,
            )
        )
    return lines


class PaymentService:
    """Use case: record a registration payment and settle pending online payments."""

    def __init__(
        self,
        tx: TransactionManager,
        registrations: RegistrationRepository,
        invoices: InvoiceRepository,
        payments: PaymentRepository,
        students: StudentRepository,
        numbers: DocumentNumberGenerator,
        sms: SmsSender,
        *,
        payment_link_base_url: str,
        school_name: str = DEFAULT_SCHOOL_NAME,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._tx = tx
        self._registrations = registrations
        self._invoices = invoices
        self._payments = payments
        self._students = students
        self._numbers = numbers
        self._sms = sms
        self._payment_link_base_url = payment_link_base_url
        self._school_name = school_name
        self._clock = clock or now_local

    def handle_payment(
        self,
        *,
        actor: SessionUser,
        registration_id: Any,
        payment_method: Any,
        payment_date: Any = None,
        discount_percentage: Any = None,
        receipt_number: Optional[str] = None,
        transaction_number: Optional[str] = None,
        paid_amount: Any = None,
        notes: Optional[str] = None,
    ) -> PaymentOutcome:
        # Checks run in a fixed order and all of them happen before any write.
        if registration_id in (None, "") or payment_method in (None, ""):
            raise ValidationError("Registration ID and payment method are required")
        registration_id = require_int(registration_id, "registrationId")
        method = parse_enum(PaymentMethod, payment_method, "paymentMethod")
        receipt_number = (receipt_number or "").strip() or None
        transaction_number = (transaction_number or "").strip() or None

        manual_amount = optional_money(paid_amount, "paidAmount")
        if method.is_manual:
            if not receipt_number and not transaction_number:
                raise ValidationError("Receipt number or transaction number is required for manual payments")
            if manual_amount is None or manual_amount <= 0:
                raise ValidationError("Paid amount must be greater than 0 for manual payments")

        discount = optional_decimal(discount_percentage, "discountPercentage")
        if discount is None:
            discount = Decimal("0")
        if discount < 0 or discount > 100:
            raise ValidationError("Discount percentage must be between 0 and 100")
        if isinstance(payment_date, str):
            payment_date = parse_iso_datetime(payment_date, "paymentDate")

        registration = self._registrations.get_by_id(registration_id)
        if not registration:
            raise NotFoundError("Registration not found")
        if registration.status != RegistrationStatus.PENDING_PAYMENT:
            raise ConflictError("Registration payment already processed", status=registration.status.value)
        ensure_branch_write(actor, registration.branch_id)

        base_total = to_money(registration.registration_fee + registration.additional_fee)
        final_amount, discount_amount = apply_discount(base_total, discount)
        actual_paid = manual_amount if method.is_manual else final_amount

        now = self._clock()
        paid_at = payment_date or now
        invoice_status = InvoiceStatus.PAID if method.is_manual else InvoiceStatus.PENDING
        payment_status = PaymentStatus.COMPLETED if method.is_manual else PaymentStatus.PENDING
        registration_status = RegistrationStatus.PAYMENT_COMPLETED if method.is_manual else RegistrationStatus.PENDING_PAYMENT

        with self._tx.transaction():
            invoice_id = self._invoices.create(
                invoice_number=self._numbers.next_document_number(INVOICE_PREFIX, at=now),
                student_id=registration.student_id,
                branch_id=registration.branch_id,
                registration_id=registration.registration_id,
                total_amount=base_total,
                discount_amount=discount_amount,
                final_amount=final_amount,
                paid_amount=actual_paid,
                status=invoice_status,
                due_date=registration.payment_due_date,
                created_by_id=actor.user_id,
                created_at=now,
                notes=notes,
            )
            for code, fee_name, description, amount in invoice_lines(registration):
                self._invoices.add_item(
                    invoice_id=invoice_id,
                    fee_type_id=self._invoices.fee_type_id(code=code, name=fee_name),
                    description=description,
                    amount=amount,
                    quantity=1,
                )
            payment_id = self._payments.create(
                payment_number=self._numbers.next_document_number(PAYMENT_PREFIX, at=now),
                invoice_id=invoice_id,
                student_id=registration.student_id,
                registration_id=registration.registration_id,
                branch_id=registration.branch_id,
                amount=actual_paid,
                payment_method=method,
                status=payment_status,
                payment_date=paid_at,
                processed_by_id=actor.user_id,
                transaction_id=transaction_number,
                receipt_number=receipt_number,
                notes=notes,
            )
            recorded = self._registrations.record_payment(
                registration_id=registration.registration_id,
                status=registration_status,
                paid_amount=actual_paid,
                discount_percentage=to_money(discount),
                discount_amount=discount_amount,
                completed_at=now if method.is_manual else None,
            )
            if not recorded:
                # Lost a race with another submission for the same registration.
                raise ConflictError("Registration payment already processed")

        logger.info(
            "Registration %s payment recorded: invoice=%s method=%s final=%s paid=%s",
            registration.registration_number,
            invoice_id,
            method.value,
            final_amount,
            actual_paid,
        )

        updated = self._registrations.get_by_id(registration.registration_id)
        invoice = self._invoices.get_by_id(invoice_id)
        payment = self._payments.get_by_id(payment_id)

        if method.is_manual:
            compose = partial(
                enrollment_ready_message,
                registration_number=registration.registration_number,
                amount=actual_paid,
                school_name=self._school_name,
            )
            redirect_to = f"/dashboard/registration-payments/{registration.registration_id}/success?invoiceId={invoice_id}"
            outcome_message = "Payment recorded successfully. Student is ready for enrollment"
        else:
            compose = partial(
                payment_link_message,
                amount=final_amount,
                link=payment_link(self._payment_link_base_url, invoice_id),
                school_name=self._school_name,
            )
            redirect_to = f"/dashboard/invoices/{invoice_id}"
            outcome_message = "Invoice created. Payment link sent to parent"
        self._notify_parent(registration.student_id, compose)

        return PaymentOutcome(
            message=outcome_message,
            registration=updated,
            invoice=invoice,
            payment=payment,
            redirect_to=redirect_to,
        )

    def confirm_payment(
        self,
        *,
        actor: SessionUser,
        invoice_id: Any,
        transaction_reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ConfirmationOutcome:
        invoice_id = require_int(invoice_id, "invoiceId")
        invoice = self._invoices.get_by_id(invoice_id)
        if not invoice or not can_access_branch(actor, invoice.branch_id):
            raise NotFoundError("Invoice not found")
        if invoice.status == InvoiceStatus.PAID:
            raise ConflictError("Invoice already paid")
        pending = self._payments.find_pending_for_invoice(invoice_id)
        if not pending:
            raise ConflictError("No pending payment found")

        now = self._clock()
        with self._tx.transaction():
            if not self._payments.complete(
                payment_id=pending.payment_id,
                transaction_id=(transaction_reference or "").strip() or pending.transaction_id,
                notes=notes,
            ):
                raise ConflictError("No pending payment found")
            if not self._invoices.mark_paid(invoice_id=invoice_id, paid_amount=invoice.total_amount):
                raise ConflictError("Invoice already paid")

            registration = self._pending_registration_for(invoice.student_id, invoice.registration_id)
            if registration:
                self._registrations.mark_payment_completed(
                    registration_id=registration.registration_id,
                    paid_amount=invoice.total_amount,
                    completed_at=now,
                )

        logger.info("Invoice %s confirmed by user=%s (payment=%s)", invoice.invoice_number, actor.user_id, pending.payment_id)
        return ConfirmationOutcome(
            message="Payment confirmed successfully",
            invoice=self._invoices.get_by_id(invoice_id),
            payment=self._payments.get_by_id(pending.payment_id),
        )

    def _pending_registration_for(self, student_id: int, registration_id: Optional[int]) -> Optional[Registration]:
        if registration_id is not None:
            linked = self._registrations.get_by_id(registration_id)
            if linked and linked.status == RegistrationStatus.PENDING_PAYMENT:
                return linked
        return self._registrations.find_pending_for_student(student_id=student_id)

    def _notify_parent(self, student_id: int, compose: Callable[..., str]) -> bool:
        """Best-effort SMS after commit; failures are logged and never raised."""
        try:
            parent = self._students.get_primary_parent(student_id)
            if not parent or not parent.phone:
                logger.info("No parent phone for student=%s, SMS skipped", student_id)
                return False
            student = self._students.get_by_id(student_id)
            self._sms.send(phone=parent.phone, message=compose(student_name=student.full_name if student else ""))
            return True
        except Exception:
            logger.exception("SMS notification failed for student=%s", student_id)
            return False
