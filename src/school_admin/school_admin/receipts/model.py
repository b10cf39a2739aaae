from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence


@dataclass(frozen=True)
class ReceiptLine:
    description: str
    fee_type: str
    quantity: int
    amount: Decimal


@dataclass(frozen=True)
class Receipt:
    """Everything printed on a single-student receipt."""

    invoice_id: int
    invoice_number: str
    receipt_number: str
    receipt_date: datetime
    school_name: str
    fs_number: str
    student_name: str
    student_code: str
    grade_name: str
    branch_name: str
    parent_name: str
    parent_phone: str
    payment_duration: str
    items: Sequence[ReceiptLine]
    base_amount: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    penalty_fee: Decimal
    final_amount: Decimal
    payment_method: str
    transaction_id: str
    cashier_name: str
    payment_date: Optional[datetime]


@dataclass(frozen=True)
class CombinedReceipt:
    school_name: str
    receipt_date: datetime
    parent_name: str
    parent_phone: str
    receipts: Sequence[Receipt]
    total_discount: Decimal
    total_penalty: Decimal
    grand_total: Decimal


@dataclass(frozen=True)
class FsNumberStatus:
    has_fs: bool
    fs_number: Optional[str]
    needs_fs_number: bool
