from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for access control."""

    SUPER_ADMIN = "SUPER_ADMIN"
    BRANCH_ADMIN = "BRANCH_ADMIN"
    REGISTRAR = "REGISTRAR"
    CASHIER = "CASHIER"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"


class RegistrationStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAYMENT_COMPLETED = "PAYMENT_COMPLETED"
    ENROLLED = "ENROLLED"


class PaymentDuration(str, Enum):
    ONE_MONTH = "ONE_MONTH"
    TWO_MONTHS = "TWO_MONTHS"
    QUARTER = "QUARTER"
    THREE_MONTHS = "THREE_MONTHS"
    FOUR_MONTHS = "FOUR_MONTHS"
    FIVE_MONTHS = "FIVE_MONTHS"
    TEN_MONTHS = "TEN_MONTHS"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    TELEBIRR = "TELEBIRR"
    ONLINE = "ONLINE"

    @property
    def is_manual(self) -> bool:
        """Manual methods are settled at the desk with a self-reported amount."""
        return self in (PaymentMethod.CASH, PaymentMethod.BANK_TRANSFER)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class InvoiceStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class EnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
