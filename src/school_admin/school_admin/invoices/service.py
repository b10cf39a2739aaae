from __future__ import annotations

import io
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from ..common.datetime_utils import now_local
from ..common.numbering import DocumentNumberGenerator
from ..common.pagination import Page, normalize_page
from ..common.validators import require_int
from ..core.constants import DEFAULT_SCHOOL_NAME, INVOICE_PREFIX
from ..core.enums import PaymentStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.connection import TransactionManager
from ..notifications.sms import SmsError, SmsSender, payment_link, payment_link_message
from ..payments.model import Payment
from ..payments.repository import PaymentRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.model import SessionUser
from ..users.permissions import branch_scope, can_access_branch
from .model import Invoice, InvoiceFilter, InvoiceItem
from .repository import InvoiceRepository

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = (
    ("invoice_number", "Invoice Number"),
    ("transaction_id", "Transaction ID"),
    ("registration_number", "Registration Number"),
    ("student_name", "Student Name"),
    ("student_code", "Student ID"),
    ("parent_name", "Parent Name"),
    ("parent_phone", "Parent Phone"),
    ("branch_name", "Branch"),
    ("total_amount", "Total Amount"),
    ("paid_amount", "Paid Amount"),
    ("status", "Status"),
    ("payment_method", "Payment Method"),
    ("payment_date", "Payment Date"),
    ("created_by", "Created By"),
    ("created_at", "Created At"),
)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class InvoiceDetails:
    invoice: Invoice
    items: Sequence[InvoiceItem]
    payments: Sequence[Payment]
    student: Optional[Student]


@dataclass(frozen=True)
class InvoiceExport:
    filename: str
    content: bytes
    mimetype: str = XLSX_MIMETYPE


@dataclass(frozen=True)
class ResendOutcome:
    message: str
    invoice_number: str
    payment_link: str


def scoped_invoice_filter(actor: SessionUser, filters: InvoiceFilter) -> InvoiceFilter:
    page, limit = normalize_page(filters.page, filters.limit)
    scope = branch_scope(actor)
    return replace(filters, branch_id=filters.branch_id if scope is None else scope, page=page, limit=limit)


def _export_cell(key: str, value: Any) -> Any:
    if value is None:
        return ""
    if key in ("total_amount", "paid_amount"):
        return float(value)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return value


def build_invoice_workbook(rows: Sequence[dict]) -> bytes:
    records = [{title: _export_cell(key, row.get(key)) for key, title in EXPORT_COLUMNS} for row in rows]
    df = pd.DataFrame(records, columns=[title for _, title in EXPORT_COLUMNS])

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Invoices")
        sheet = writer.sheets["Invoices"]
        for idx, (_, title) in enumerate(EXPORT_COLUMNS):
            width = max([len(title)] + [len(str(v)) for v in df[title].tolist()])
            sheet.column_dimensions[get_column_letter(idx + 1)].width = min(width + 2, 40)
    return out.getvalue()


class InvoiceService:
    """Use case: browse, export and chase invoices."""

    def __init__(
        self,
        tx: TransactionManager,
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
        self._invoices = invoices
        self._payments = payments
        self._students = students
        self._numbers = numbers
        self._sms = sms
        self._payment_link_base_url = payment_link_base_url
        self._school_name = school_name
        self._clock = clock or now_local

    def _get_scoped(self, actor: SessionUser, invoice_id: Any) -> Invoice:
        invoice = self._invoices.get_by_id(require_int(invoice_id, "invoiceId"))
        if not invoice or not can_access_branch(actor, invoice.branch_id):
            raise NotFoundError("Invoice not found")
        return invoice

    def list_invoices(self, *, actor: SessionUser, filters: InvoiceFilter) -> Page[dict]:
        filters = scoped_invoice_filter(actor, filters)
        rows, total = self._invoices.search(filters)
        return Page.build(rows, page=filters.page, limit=filters.limit, total=total)

    def get_invoice(self, *, actor: SessionUser, invoice_id: Any) -> InvoiceDetails:
        invoice = self._get_scoped(actor, invoice_id)
        return InvoiceDetails(
            invoice=invoice,
            items=self._invoices.list_items(invoice.invoice_id),
            payments=self._payments.list_for_invoice(invoice.invoice_id),
            student=self._students.get_by_id(invoice.student_id),
        )

    def export_invoices(self, *, actor: SessionUser, filters: InvoiceFilter) -> InvoiceExport:
        filters = scoped_invoice_filter(actor, filters)
        rows = self._invoices.list_for_export(filters)
        filename = f"invoices-export-{self._clock():%Y-%m-%d}.xlsx"
        logger.info("Exporting %d invoices for user=%s", len(rows), actor.user_id)
        return InvoiceExport(filename=filename, content=build_invoice_workbook(rows))

    def resend_payment_link(self, *, actor: SessionUser, invoice_id: Any) -> ResendOutcome:
        invoice = self._get_scoped(actor, invoice_id)
        pending = next(
            (
                p
                for p in self._payments.list_for_invoice(invoice.invoice_id)
                if p.status == PaymentStatus.PENDING and not p.payment_method.is_manual
            ),
            None,
        )
        if not pending:
            raise ConflictError("No pending online payment found")

        parent = self._students.get_primary_parent(invoice.student_id)
        if not parent or not parent.phone:
            raise ValidationError("Parent phone number not found")

        # The link is keyed on invoice_id, so links sent earlier stay valid.
        with self._tx.transaction():
            invoice_number = self._numbers.next_document_number(INVOICE_PREFIX, at=self._clock())
            self._invoices.set_invoice_number(invoice_id=invoice.invoice_id, invoice_number=invoice_number)

        link = payment_link(self._payment_link_base_url, invoice.invoice_id)
        student = self._students.get_by_id(invoice.student_id)
        try:
            self._sms.send(
                phone=parent.phone,
                message=payment_link_message(
                    student_name=student.full_name if student else "",
                    amount=invoice.final_amount,
                    link=link,
                    school_name=self._school_name,
                ),
            )
        except SmsError:
            logger.exception("Payment link SMS failed for invoice=%s", invoice.invoice_id)

        logger.info("Payment link resent for invoice=%s (%s)", invoice.invoice_id, invoice_number)
        return ResendOutcome(message="Payment link resent successfully", invoice_number=invoice_number, payment_link=link)
