from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..common.money import to_money
from ..core.enums import PaymentMethod, PaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Payment
from .repository import PaymentRepository

_COLUMNS = """
    payment_id, payment_number, invoice_id, student_id, registration_id, branch_id,
    amount, payment_method, status, transaction_id, receipt_number, payment_date,
    processed_by_id, notes, created_at
"""


def _to_payment(r: Dict[str, Any]) -> Payment:
    return Payment(
        payment_id=int(r["payment_id"]),
        payment_number=r["payment_number"],
        invoice_id=int(r["invoice_id"]),
        student_id=int(r["student_id"]),
        registration_id=r.get("registration_id"),
        branch_id=int(r["branch_id"]),
        amount=to_money(r["amount"]),
        payment_method=PaymentMethod(r["payment_method"]),
        status=PaymentStatus(r["status"]),
        payment_date=r["payment_date"],
        processed_by_id=int(r["processed_by_id"]),
        created_at=r["created_at"],
        transaction_id=r.get("transaction_id"),
        receipt_number=r.get("receipt_number"),
        notes=r.get("notes"),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(
                    payment_number, invoice_id, student_id, registration_id, branch_id, amount,
                    payment_method, status, transaction_id, receipt_number, payment_date,
                    processed_by_id, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    payment_number,
                    int(invoice_id),
                    int(student_id),
                    registration_id,
                    int(branch_id),
                    amount,
                    payment_method.value,
                    status.value,
                    transaction_id,
                    receipt_number,
                    payment_date,
                    int(processed_by_id),
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payments WHERE payment_id=%s", (int(payment_id),))
            r = fetchone(cur)
            return _to_payment(r) if r else None

    def list_for_invoice(self, invoice_id: int) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payments WHERE invoice_id=%s ORDER BY created_at DESC, payment_id DESC",
                (int(invoice_id),),
            )
            return [_to_payment(r) for r in fetchall(cur)]

    def find_pending_for_invoice(self, invoice_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM payments
                WHERE invoice_id=%s AND status=%s
                ORDER BY payment_id DESC
                LIMIT 1
                """,
                (int(invoice_id), PaymentStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _to_payment(r) if r else None

    def complete(self, *, payment_id: int, transaction_id: Optional[str], notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payments
                SET status=%s, transaction_id=%s, notes=COALESCE(%s, notes)
                WHERE payment_id=%s AND status=%s
                """,
                (
                    PaymentStatus.COMPLETED.value,
                    transaction_id,
                    notes,
                    int(payment_id),
                    PaymentStatus.PENDING.value,
                ),
            )
            return cur.rowcount == 1
