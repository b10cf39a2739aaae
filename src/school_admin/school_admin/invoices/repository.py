from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import InvoiceStatus
from .model import Invoice, InvoiceFilter, InvoiceItem


class InvoiceRepository(Protocol):
    def create(
        self,
        *,
        invoice_number: str,
        student_id: int,
        branch_id: int,
        registration_id: Optional[int],
        total_amount: Decimal,
        discount_amount: Decimal,
        final_amount: Decimal,
        paid_amount: Decimal,
        status: InvoiceStatus,
        due_date: datetime,
        created_by_id: int,
        created_at: datetime,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def fee_type_id(self, *, code: str, name: str) -> int:
        """Id of the fee type with ``code``, created on first use."""

        raise NotImplementedError

    def add_item(self, *, invoice_id: int, fee_type_id: int, description: str, amount: Decimal, quantity: int = 1) -> int:
        raise NotImplementedError

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def find_latest_for_registration(self, registration_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def list_items(self, invoice_id: int) -> Sequence[InvoiceItem]:
        raise NotImplementedError

    def mark_paid(self, *, invoice_id: int, paid_amount: Decimal) -> bool:
        """Only applies to an invoice that is not PAID yet."""

        raise NotImplementedError

    def assign_fs_number(self, *, invoice_id: int, fs_number: str) -> bool:
        """Only applies while the invoice has no FS number."""

        raise NotImplementedError

    def set_invoice_number(self, *, invoice_id: int, invoice_number: str) -> bool:
        raise NotImplementedError

    def search(self, filters: InvoiceFilter) -> Tuple[Sequence[dict], int]:
        """Return UI rows (student, parent, latest payment) for one page plus the total count."""

        raise NotImplementedError

    def list_for_export(self, filters: InvoiceFilter) -> Sequence[dict]:
        raise NotImplementedError

    def list_for_parent(
        self,
        *,
        parent_user_id: Optional[int] = None,
        parent_phone: Optional[str] = None,
        branch_id: Optional[int] = None,
    ) -> Sequence[dict]:
        raise NotImplementedError
