from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..common.money import to_money
from ..core.enums import InvoiceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, like_pattern
from .model import Invoice, InvoiceFilter, InvoiceItem
from .repository import InvoiceRepository

_COLUMNS = """
    invoice_id, invoice_number, student_id, branch_id, registration_id,
    total_amount, discount_amount, final_amount, paid_amount, status,
    fs_number, due_date, notes, created_by_id, created_at
"""

# Invoice joined with student, primary parent, branch, registration, creator and latest payment.
_LISTING_FROM = """
    FROM invoices i
    JOIN students s ON s.student_id = i.student_id
    JOIN users su ON su.user_id = s.user_id
    JOIN branches b ON b.branch_id = i.branch_id
    LEFT JOIN registrations r ON r.registration_id = i.registration_id
    LEFT JOIN users cu ON cu.user_id = i.created_by_id
    LEFT JOIN student_parents sp ON sp.student_id = s.student_id AND sp.is_primary = 1
    LEFT JOIN users pu ON pu.user_id = sp.parent_user_id
    LEFT JOIN payments p ON p.payment_id = (
        SELECT MAX(p2.payment_id) FROM payments p2 WHERE p2.invoice_id = i.invoice_id
    )
"""

_LISTING_COLUMNS = """
    i.invoice_id, i.invoice_number, i.status, i.total_amount, i.discount_amount,
    i.final_amount, i.paid_amount, i.fs_number, i.due_date, i.created_at,
    s.student_id, s.student_code,
    CONCAT(su.first_name, ' ', su.last_name) AS student_name,
    CONCAT(pu.first_name, ' ', pu.last_name) AS parent_name, pu.phone AS parent_phone,
    b.name AS branch_name, r.registration_number,
    CONCAT(cu.first_name, ' ', cu.last_name) AS created_by,
    p.payment_method, p.payment_date, p.transaction_id
"""


def _to_invoice(r: Dict[str, Any]) -> Invoice:
    return Invoice(
        invoice_id=int(r["invoice_id"]),
        invoice_number=r["invoice_number"],
        student_id=int(r["student_id"]),
        branch_id=int(r["branch_id"]),
        registration_id=r.get("registration_id"),
        total_amount=to_money(r["total_amount"]),
        discount_amount=to_money(r["discount_amount"]),
        final_amount=to_money(r["final_amount"]),
        paid_amount=to_money(r["paid_amount"]),
        status=InvoiceStatus(r["status"]),
        due_date=r["due_date"],
        created_by_id=int(r["created_by_id"]),
        created_at=r["created_at"],
        fs_number=r.get("fs_number"),
        notes=r.get("notes"),
    )


def _listing_row(r: Dict[str, Any]) -> dict:
    return {
        "invoice_id": int(r["invoice_id"]),
        "invoice_number": r["invoice_number"],
        "status": r["status"],
        "total_amount": to_money(r["total_amount"]),
        "discount_amount": to_money(r["discount_amount"]),
        "final_amount": to_money(r["final_amount"]),
        "paid_amount": to_money(r["paid_amount"]),
        "fs_number": r.get("fs_number"),
        "due_date": r["due_date"],
        "created_at": r["created_at"],
        "student_id": int(r["student_id"]),
        "student_code": r["student_code"],
        "student_name": r["student_name"],
        "parent_name": r.get("parent_name"),
        "parent_phone": r.get("parent_phone"),
        "branch_name": r["branch_name"],
        "registration_number": r.get("registration_number"),
        "created_by": r.get("created_by"),
        "payment_method": r.get("payment_method"),
        "payment_date": r.get("payment_date"),
        "transaction_id": r.get("transaction_id"),
    }


def _filter_clauses(filters: InvoiceFilter) -> Tuple[str, List[object]]:
    clauses = ["1=1"]
    params: List[object] = []

    if filters.branch_id is not None:
        clauses.append("i.branch_id=%s")
        params.append(int(filters.branch_id))
    if filters.status is not None:
        clauses.append("i.status=%s")
        params.append(filters.status.value)
    if filters.payment_method is not None:
        clauses.append("p.payment_method=%s")
        params.append(filters.payment_method.value)
    if filters.search:
        pattern = like_pattern(filters.search)
        clauses.append(
            "(i.invoice_number LIKE %s OR s.student_code LIKE %s OR su.first_name LIKE %s"
            " OR su.last_name LIKE %s OR pu.phone LIKE %s)"
        )
        params.extend([pattern] * 5)

    return " AND ".join(clauses), params


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invoices(
                    invoice_number, student_id, branch_id, registration_id,
                    total_amount, discount_amount, final_amount, paid_amount, status,
                    due_date, notes, created_by_id, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    invoice_number,
                    int(student_id),
                    int(branch_id),
                    registration_id,
                    total_amount,
                    discount_amount,
                    final_amount,
                    paid_amount,
                    status.value,
                    due_date,
                    notes,
                    int(created_by_id),
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def fee_type_id(self, *, code: str, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO fee_types(code, name) VALUES(%s,%s) ON DUPLICATE KEY UPDATE fee_type_id=LAST_INSERT_ID(fee_type_id)",
                (code, name),
            )
            return int(cur.lastrowid)

    def add_item(self, *, invoice_id: int, fee_type_id: int, description: str, amount: Decimal, quantity: int = 1) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invoice_items(invoice_id, fee_type_id, description, amount, quantity)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(invoice_id), int(fee_type_id), description, amount, int(quantity)),
            )
            return int(cur.lastrowid)

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invoices WHERE invoice_id=%s", (int(invoice_id),))
            r = fetchone(cur)
            return _to_invoice(r) if r else None

    def find_latest_for_registration(self, registration_id: int) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM invoices WHERE registration_id=%s ORDER BY invoice_id DESC LIMIT 1",
                (int(registration_id),),
            )
            r = fetchone(cur)
            return _to_invoice(r) if r else None

    def list_items(self, invoice_id: int) -> Sequence[InvoiceItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT it.item_id, it.invoice_id, it.fee_type_id, it.description, it.amount, it.quantity,
                       ft.name AS fee_type_name
                FROM invoice_items it
                JOIN fee_types ft ON ft.fee_type_id = it.fee_type_id
                WHERE it.invoice_id=%s
                ORDER BY it.item_id
                """,
                (int(invoice_id),),
            )
            return [
                InvoiceItem(
                    item_id=int(r["item_id"]),
                    invoice_id=int(r["invoice_id"]),
                    fee_type_id=int(r["fee_type_id"]),
                    description=r["description"],
                    amount=to_money(r["amount"]),
                    quantity=int(r["quantity"]),
                    fee_type_name=r["fee_type_name"],
                )
                for r in fetchall(cur)
            ]

    def mark_paid(self, *, invoice_id: int, paid_amount: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invoices SET status=%s, paid_amount=%s WHERE invoice_id=%s AND status<>%s",
                (InvoiceStatus.PAID.value, paid_amount, int(invoice_id), InvoiceStatus.PAID.value),
            )
            return cur.rowcount == 1

    def assign_fs_number(self, *, invoice_id: int, fs_number: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invoices SET fs_number=%s WHERE invoice_id=%s AND fs_number IS NULL",
                (fs_number, int(invoice_id)),
            )
            return cur.rowcount == 1

    def set_invoice_number(self, *, invoice_id: int, invoice_number: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invoices SET invoice_number=%s WHERE invoice_id=%s",
                (invoice_number, int(invoice_id)),
            )
            return cur.rowcount == 1

    def search(self, filters: InvoiceFilter) -> Tuple[Sequence[dict], int]:
        where, params = _filter_clauses(filters)
        offset = (filters.page - 1) * filters.limit
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total {_LISTING_FROM} WHERE {where}", tuple(params))
            total = int(fetchone(cur)["total"])
            cur.execute(
                f"""
                SELECT {_LISTING_COLUMNS} {_LISTING_FROM}
                WHERE {where}
                ORDER BY i.created_at DESC, i.invoice_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(filters.limit), int(offset)]),
            )
            return [_listing_row(r) for r in fetchall(cur)], total

    def list_for_export(self, filters: InvoiceFilter) -> Sequence[dict]:
        where, params = _filter_clauses(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_LISTING_COLUMNS} {_LISTING_FROM} WHERE {where} ORDER BY i.created_at DESC, i.invoice_id DESC",
                tuple(params),
            )
            return [_listing_row(r) for r in fetchall(cur)]

    def list_for_parent(
        self,
        *,
        parent_user_id: Optional[int] = None,
        parent_phone: Optional[str] = None,
        branch_id: Optional[int] = None,
    ) -> Sequence[dict]:
        clauses = ["1=1"]
        params: List[object] = []
        if parent_user_id is not None:
            clauses.append("par.user_id=%s")
            params.append(int(parent_user_id))
        if parent_phone is not None:
            clauses.append("par.phone=%s")
            params.append(parent_phone)
        if branch_id is not None:
            clauses.append("i.branch_id=%s")
            params.append(int(branch_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT DISTINCT i.invoice_id, i.invoice_number, i.status, i.total_amount,
                       i.final_amount, i.paid_amount, i.fs_number, i.created_at,
                       s.student_id, s.student_code,
                       CONCAT(su.first_name, ' ', su.last_name) AS student_name
                FROM invoices i
                JOIN students s ON s.student_id = i.student_id
                JOIN users su ON su.user_id = s.user_id
                JOIN student_parents link ON link.student_id = s.student_id
                JOIN users par ON par.user_id = link.parent_user_id
                WHERE {" AND ".join(clauses)}
                ORDER BY i.created_at DESC
                """,
                tuple(params),
            )
            return [
                {
                    "invoice_id": int(r["invoice_id"]),
                    "invoice_number": r["invoice_number"],
                    "status": r["status"],
                    "total_amount": to_money(r["total_amount"]),
                    "final_amount": to_money(r["final_amount"]),
                    "paid_amount": to_money(r["paid_amount"]),
                    "fs_number": r.get("fs_number"),
                    "created_at": r["created_at"],
                    "student_id": int(r["student_id"]),
                    "student_code": r["student_code"],
                    "student_name": r["student_name"],
                }
                for r in fetchall(cur)
            ]
