from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentMethod, PaymentStatus
from ..invoices.model import Invoice
from ..registrations.model import Registration


@dataclass(frozen=True)
class Payment:
    """Settlement attempt against an invoice."""

    payment_id: int
    payment_number: str
    invoice_id: int
    student_id: int
    registration_id: Optional[int]
    branch_id: int
    amount: Decimal
    payment_method: PaymentMethod
    status: PaymentStatus
    payment_date: datetime
    processed_by_id: int
    created_at: datetime
    transaction_id: Optional[str] = None
    receipt_number: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class PaymentOutcome:
    message: str
    registration: Registration
    invoice: Invoice
    payment: Payment
    redirect_to: str


@dataclass(frozen=True)
class ConfirmationOutcome:
    message: str
    invoice: Invoice
    payment: Payment
