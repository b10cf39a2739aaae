from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import InvoiceStatus, PaymentMethod


@dataclass(frozen=True)
class Invoice:
    invoice_id: int
    invoice_number: str
    student_id: int
    branch_id: int
    registration_id: Optional[int]
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    paid_amount: Decimal
    status: InvoiceStatus
    due_date: datetime
    created_by_id: int
    created_at: datetime
    fs_number: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class InvoiceItem:
    """Billed line; never modified after creation."""

    item_id: int
    invoice_id: int
    fee_type_id: int
    description: str
    amount: Decimal
    quantity: int = 1
    fee_type_name: str = ""


@dataclass(frozen=True)
class InvoiceFilter:
    branch_id: Optional[int] = None
    status: Optional[InvoiceStatus] = None
    payment_method: Optional[PaymentMethod] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = 10
