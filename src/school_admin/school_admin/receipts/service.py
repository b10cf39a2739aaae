from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.money import ZERO, to_money
from ..common.validators import require_int
from ..core.constants import DEFAULT_SCHOOL_NAME
from ..core.enums import PaymentStatus
from ..core.exceptions import ConflictError, FsNumberRequiredError, NotFoundError, ValidationError
from ..invoices.model import Invoice
from ..invoices.repository import InvoiceRepository
from ..payments.model import Payment
from ..payments.repository import PaymentRepository
from ..registrations.repository import RegistrationRepository
from ..students.repository import StudentRepository
from ..users.model import SessionUser
from ..users.permissions import branch_scope, can_access_branch
from ..users.repository import UserRepository
from .formatting import calculate_penalty_fee, format_payment_duration
from .model import CombinedReceipt, FsNumberStatus, Receipt, ReceiptLine

logger = logging.getLogger(__name__)


def settled_payment(payments: Sequence[Payment]) -> Optional[Payment]:
    """Latest completed payment, falling back to the latest attempt."""
    for payment in payments:
        if payment.status == PaymentStatus.COMPLETED:
            return payment
    return payments[0] if payments else None


class ReceiptService:
    """Use case: FS numbers and receipt documents for paid invoices."""

    def __init__(
        self,
        invoices: InvoiceRepository,
        payments: PaymentRepository,
        registrations: RegistrationRepository,
        students: StudentRepository,
        users: UserRepository,
        *,
        school_name: str = DEFAULT_SCHOOL_NAME,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._invoices = invoices
        self._payments = payments
        self._registrations = registrations
        self._students = students
        self._users = users
        self._school_name = school_name
        self._clock = clock or now_local

    def _get_scoped(self, actor: SessionUser, invoice_id: Any) -> Invoice:
        invoice = self._invoices.get_by_id(require_int(invoice_id, "invoiceId"))
        if not invoice or not can_access_branch(actor, invoice.branch_id):
            raise NotFoundError("Invoice not found")
        return invoice

    def check_fs_number(self, *, actor: SessionUser, invoice_id: Any) -> FsNumberStatus:
        invoice = self._get_scoped(actor, invoice_id)
        return FsNumberStatus(
            has_fs=bool(invoice.fs_number),
            fs_number=invoice.fs_number,
            needs_fs_number=not invoice.fs_number,
        )

    def update_fs_number(self, *, actor: SessionUser, invoice_id: Any, fs_number: Optional[str]) -> str:
        fs_number = (fs_number or "").strip()
        if not fs_number:
            raise ValidationError("FS number is required")
        invoice = self._get_scoped(actor, invoice_id)
        if invoice.fs_number:
            raise ConflictError("FS number already assigned", fs_number=invoice.fs_number)
        if not self._invoices.assign_fs_number(invoice_id=invoice.invoice_id, fs_number=fs_number):
            raise ConflictError("FS number already assigned")
        logger.info("FS number %s assigned to invoice=%s by user=%s", fs_number, invoice.invoice_id, actor.user_id)
        return fs_number

    def list_parent_invoices(self, *, actor: SessionUser, parent_phone: str) -> Sequence[dict]:
        parent_phone = (parent_phone or "").strip()
        if not parent_phone:
            raise ValidationError("Parent phone is required")
        return self._invoices.list_for_parent(parent_phone=parent_phone, branch_id=branch_scope(actor))

    def get_receipt(self, *, actor: SessionUser, invoice_id: Any) -> Receipt:
        invoice = self._get_scoped(actor, invoice_id)
        self._require_fs_numbers([invoice], "FS number required")
        return self._build_receipt(invoice)

    def generate(self, *, actor: SessionUser, invoice_ids: Sequence[Any]):
        """One id gives a single receipt, several give a combined one."""
        if not invoice_ids:
            raise ValidationError("Invoice IDs are required")
        invoices = [self._get_scoped(actor, invoice_id) for invoice_id in invoice_ids]
        if len(invoices) == 1:
            self._require_fs_numbers(invoices, "FS number required")
            return self._build_receipt(invoices[0])
        self._require_fs_numbers(invoices, "Some invoices require FS numbers")
        return self._combine(invoices, parent=self._students.get_primary_parent(invoices[0].student_id))

    def combined_for_parent(self, *, actor: SessionUser, parent_id: Any) -> CombinedReceipt:
        parent_id = require_int(parent_id, "parentId")
        rows = self._invoices.list_for_parent(parent_user_id=parent_id, branch_id=branch_scope(actor))
        if not rows:
            raise NotFoundError("No invoices found for this parent")
        invoices = [self._invoices.get_by_id(row["invoice_id"]) for row in rows]
        self._require_fs_numbers(invoices, "Some invoices require FS numbers")
        return self._combine(invoices, parent=self._students.get_parent(parent_id))

    def _require_fs_numbers(self, invoices: Sequence[Invoice], message: str) -> None:
        missing = []
        for invoice in invoices:
            if not invoice.fs_number:
                student = self._students.get_by_id(invoice.student_id)
                missing.append({"id": invoice.invoice_id, "student_name": student.full_name if student else ""})
        if missing:
            raise FsNumberRequiredError(message, invoices_needing_fs=missing)

    def _combine(self, invoices: Sequence[Invoice], *, parent) -> CombinedReceipt:
        receipts: List[Receipt] = [self._build_receipt(invoice) for invoice in invoices]
        return CombinedReceipt(
            school_name=self._school_name,
            receipt_date=self._clock(),
            parent_name=parent.full_name if parent else "",
            parent_phone=(parent.phone or "") if parent else "",
            receipts=receipts,
            total_discount=to_money(sum((r.discount_amount for r in receipts), ZERO)),
            total_penalty=to_money(sum((r.penalty_fee for r in receipts), ZERO)),
            grand_total=to_money(sum((r.final_amount for r in receipts), ZERO)),
        )

    def _build_receipt(self, invoice: Invoice) -> Receipt:
        registration = self._registrations.get_by_id(invoice.registration_id) if invoice.registration_id else None
        payment = settled_payment(self._payments.list_for_invoice(invoice.invoice_id))
        student = self._students.get_by_id(invoice.student_id)
        parent = self._students.get_primary_parent(invoice.student_id)
        cashier = self._users.get_by_id(payment.processed_by_id) if payment else None

        if registration:
            receipt_number = registration.registration_number
        elif payment and payment.transaction_id:
            receipt_number = payment.transaction_id
        else:
            receipt_number = invoice.invoice_number

        # Penalty is derived from stored instants only, so regenerating a receipt gives the same amount.
        due_date = registration.payment_due_date if registration else invoice.due_date
        penalty = to_money(calculate_penalty_fee(due_date, payment.payment_date)) if payment else ZERO
        base_amount = to_money(invoice.total_amount)
        discount_amount = to_money(invoice.discount_amount)

        return Receipt(
            invoice_id=invoice.invoice_id,
            invoice_number=invoice.invoice_number,
            receipt_number=receipt_number,
            receipt_date=self._clock(),
            school_name=self._school_name,
            fs_number=invoice.fs_number or "",
            student_name=student.full_name if student else "",
            student_code=student.student_code if student else "",
            grade_name=student.grade_name if student else "",
            branch_name=student.branch_name if student else "",
            parent_name=parent.full_name if parent else "",
            parent_phone=(parent.phone or "") if parent else "",
            payment_duration=(
                format_payment_duration(registration.payment_duration, registration.created_at) if registration else ""
            ),
            items=[
                ReceiptLine(
                    description=item.description,
                    fee_type=item.fee_type_name,
                    quantity=item.quantity,
                    amount=item.amount,
                )
                for item in self._invoices.list_items(invoice.invoice_id)
            ],
            base_amount=base_amount,
            discount_percentage=to_money(registration.discount_percentage) if registration else ZERO,
            discount_amount=discount_amount,
            penalty_fee=penalty,
            final_amount=base_amount - discount_amount + penalty,
            payment_method=payment.payment_method.value if payment else "",
            transaction_id=(payment.transaction_id or payment.receipt_number or "") if payment else "",
            cashier_name=cashier.full_name if cashier else "",
            payment_date=payment.payment_date if payment else None,
        )
