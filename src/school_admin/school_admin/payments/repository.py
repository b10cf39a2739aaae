from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentMethod, PaymentStatus
from .model import Payment


class PaymentRepository(Protocol):
    def create(
        self,
        *,
        payment_number: str,
        invoice_id: int,
        student_id: int,
        registration_id: Optional[int],
        branch_id: int,
        amount: Decimal,
        payment_method: PaymentMethod,
        status: PaymentStatus,
        payment_date: datetime,
        processed_by_id: int,
        transaction_id: Optional[str] = None,
        receipt_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def list_for_invoice(self, invoice_id: int) -> Sequence[Payment]:
        """Newest first."""

        raise NotImplementedError

    def find_pending_for_invoice(self, invoice_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def complete(self, *, payment_id: int, transaction_id: Optional[str], notes: Optional[str]) -> bool:
        """PENDING -> COMPLETED; False if the payment is no longer pending."""

        raise NotImplementedError
