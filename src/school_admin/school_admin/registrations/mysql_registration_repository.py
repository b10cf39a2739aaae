from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence, Tuple

from ..common.money import to_money
from ..core.enums import EnrollmentStatus, PaymentDuration, RegistrationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, like_pattern, money_or_none
from .model import Registration, RegistrationFilter
from .repository import RegistrationRepository

_COLUMNS = """
    registration_id, registration_number, student_id, branch_id, grade_id, academic_year_id,
    status, registration_fee, additional_fee, service_fee, total_amount,
    discount_percentage, discount_amount, paid_amount, payment_duration, payment_due_date,
    completed_at, enrolled_at, enrolled_by_id, created_at
"""


def _to_registration(r: Dict[str, Any]) -> Registration:
    return Registration(
        registration_id=int(r["registration_id"]),
        registration_number=r["registration_number"],
        student_id=int(r["student_id"]),
        branch_id=int(r["branch_id"]),
        grade_id=int(r["grade_id"]),
        academic_year_id=int(r["academic_year_id"]),
        status=RegistrationStatus(r["status"]),
        registration_fee=to_money(r["registration_fee"]),
        additional_fee=to_money(r["additional_fee"]),
        service_fee=to_money(r["service_fee"]),
        total_amount=to_money(r["total_amount"]),
        payment_duration=PaymentDuration(r["payment_duration"]),
        payment_due_date=r["payment_due_date"],
        created_at=r["created_at"],
        discount_percentage=money_or_none(r.get("discount_percentage")),
        discount_amount=money_or_none(r.get("discount_amount")),
        paid_amount=money_or_none(r.get("paid_amount")),
        completed_at=r.get("completed_at"),
        enrolled_at=r.get("enrolled_at"),
        enrolled_by_id=r.get("enrolled_by_id"),
    )


class MySQLRegistrationRepository(RegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, registration_id: int) -> Optional[Registration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM registrations WHERE registration_id=%s", (int(registration_id),))
            r = fetchone(cur)
            return _to_registration(r) if r else None

    def find_for_student_year(self, *, student_id: int, academic_year_id: int) -> Optional[Registration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM registrations WHERE student_id=%s AND academic_year_id=%s",
                (int(student_id), int(academic_year_id)),
            )
            r = fetchone(cur)
            return _to_registration(r) if r else None

    def find_pending_for_student(self, *, student_id: int) -> Optional[Registration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM registrations
                WHERE student_id=%s AND status=%s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (int(student_id), RegistrationStatus.PENDING_PAYMENT.value),
            )
            r = fetchone(cur)
            return _to_registration(r) if r else None

    def create(
        self,
        *,
        registration_number: str,
        student_id: int,
        branch_id: int,
        grade_id: int,
        academic_year_id: int,
        registration_fee: Decimal,
        additional_fee: Decimal,
        service_fee: Decimal,
        total_amount: Decimal,
        payment_duration: PaymentDuration,
        payment_due_date: datetime,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO registrations(
                    registration_number, student_id, branch_id, grade_id, academic_year_id, status,
                    registration_fee, additional_fee, service_fee, total_amount,
                    payment_duration, payment_due_date, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    registration_number,
                    int(student_id),
                    int(branch_id),
                    int(grade_id),
                    int(academic_year_id),
                    RegistrationStatus.PENDING_PAYMENT.value,
                    registration_fee,
                    additional_fee,
                    service_fee,
                    total_amount,
                    payment_duration.value,
                    payment_due_date,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def _guarded_update(self, sql: str, params: tuple) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount == 1

    def record_payment(
        self,
        *,
        registration_id: int,
        status: RegistrationStatus,
        paid_amount: Decimal,
        discount_percentage: Decimal,
        discount_amount: Decimal,
        completed_at: Optional[datetime],
    ) -> bool:
        return self._guarded_update(
            """
            UPDATE registrations
            SET status=%s, paid_amount=%s, discount_percentage=%s, discount_amount=%s, completed_at=%s
            WHERE registration_id=%s AND status=%s
            """,
            (
                status.value,
                paid_amount,
                discount_percentage,
                discount_amount,
                completed_at,
                int(registration_id),
                RegistrationStatus.PENDING_PAYMENT.value,
            ),
        )

    def mark_payment_completed(self, *, registration_id: int, paid_amount: Decimal, completed_at: datetime) -> bool:
        return self._guarded_update(
            """
            UPDATE registrations
            SET status=%s, paid_amount=%s, completed_at=%s
            WHERE registration_id=%s AND status=%s
            """,
            (
                RegistrationStatus.PAYMENT_COMPLETED.value,
                paid_amount,
                completed_at,
                int(registration_id),
                RegistrationStatus.PENDING_PAYMENT.value,
            ),
        )

    def mark_enrolled(self, *, registration_id: int, enrolled_at: datetime, enrolled_by_id: int) -> bool:
        return self._guarded_update(
            """
            UPDATE registrations
            SET status=%s, enrolled_at=%s, enrolled_by_id=%s
            WHERE registration_id=%s AND status=%s
            """,
            (
                RegistrationStatus.ENROLLED.value,
                enrolled_at,
                int(enrolled_by_id),
                int(registration_id),
                RegistrationStatus.PAYMENT_COMPLETED.value,
            ),
        )

    def revert_enrollment(self, *, registration_id: int) -> bool:
        return self._guarded_update(
            """
            UPDATE registrations
            SET status=%s, enrolled_at=NULL, enrolled_by_id=NULL
            WHERE registration_id=%s AND status=%s
            """,
            (
                RegistrationStatus.PAYMENT_COMPLETED.value,
                int(registration_id),
                RegistrationStatus.ENROLLED.value,
            ),
        )

    def search(self, filters: RegistrationFilter) -> Tuple[Sequence[dict], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if filters.branch_id is not None:
            clauses.append("r.branch_id=%s")
            params.append(int(filters.branch_id))
        if filters.grade_id is not None:
            clauses.append("r.grade_id=%s")
            params.append(int(filters.grade_id))
        if filters.status is not None:
            clauses.append("r.status=%s")
            params.append(filters.status.value)
        if filters.payment_duration is not None:
            clauses.append("r.payment_duration=%s")
            params.append(filters.payment_duration.value)
        if filters.search:
            pattern = like_pattern(filters.search)
            clauses.append(
                "(r.registration_number LIKE %s OR s.student_code LIKE %s OR u.first_name LIKE %s OR u.last_name LIKE %s)"
            )
            params.extend([pattern] * 4)

        where = " AND ".join(clauses)
        offset = (filters.page - 1) * filters.limit

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM registrations r
                JOIN students s ON s.student_id = r.student_id
                JOIN users u ON u.user_id = s.user_id
                WHERE {where}
                """,
                tuple(params),
            )
            total = int(fetchone(cur)["total"])

            cur.execute(
                f"""
                SELECT r.registration_id, r.registration_number, r.status, r.payment_duration,
                       r.registration_fee, r.additional_fee, r.service_fee, r.total_amount,
                       r.discount_amount, r.paid_amount, r.payment_due_date, r.created_at,
                       r.completed_at, r.enrolled_at, r.branch_id, r.grade_id,
                       s.student_id, s.student_code,
                       CONCAT(u.first_name, ' ', u.last_name) AS student_name,
                       b.name AS branch_name, g.name AS grade_name
                FROM registrations r
                JOIN students s ON s.student_id = r.student_id
                JOIN users u ON u.user_id = s.user_id
                JOIN branches b ON b.branch_id = r.branch_id
                JOIN grades g ON g.grade_id = r.grade_id
                WHERE {where}
                ORDER BY r.created_at DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(filters.limit), int(offset)]),
            )
            rows = fetchall(cur)

        out: list[dict] = []
        for r in rows:
            out.append(
                {
                    "registration_id": int(r["registration_id"]),
                    "registration_number": r["registration_number"],
                    "status": r["status"],
                    "payment_duration": r["payment_duration"],
                    "registration_fee": to_money(r["registration_fee"]),
                    "additional_fee": to_money(r["additional_fee"]),
                    "service_fee": to_money(r["service_fee"]),
                    "total_amount": to_money(r["total_amount"]),
                    "discount_amount": money_or_none(r.get("discount_amount")),
                    "paid_amount": money_or_none(r.get("paid_amount")),
                    "payment_due_date": r["payment_due_date"],
                    "created_at": r["created_at"],
                    "completed_at": r.get("completed_at"),
                    "enrolled_at": r.get("enrolled_at"),
                    "branch_id": int(r["branch_id"]),
                    "branch_name": r["branch_name"],
                    "grade_id": int(r["grade_id"]),
                    "grade_name": r["grade_name"],
                    "student_id": int(r["student_id"]),
                    "student_code": r["student_code"],
                    "student_name": r["student_name"],
                }
            )
        return out, total

    def count_by_status(self, *, branch_id: Optional[int] = None) -> Dict[RegistrationStatus, int]:
        sql = "SELECT status, COUNT(*) AS n FROM registrations"
        params: tuple = ()
        if branch_id is not None:
            sql += " WHERE branch_id=%s"
            params = (int(branch_id),)
        sql += " GROUP BY status"

        counts = {status: 0 for status in RegistrationStatus}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            for r in fetchall(cur):
                counts[RegistrationStatus(r["status"])] = int(r["n"])
        return counts

    def list_enrolled_students(self, *, branch_id: Optional[int] = None, grade_id: Optional[int] = None) -> Sequence[dict]:
        clauses = ["r.status=%s", "e.status=%s"]
        params: list[object] = [RegistrationStatus.ENROLLED.value, EnrollmentStatus.ACTIVE.value]
        if branch_id is not None:
            clauses.append("r.branch_id=%s")
            params.append(int(branch_id))
        if grade_id is not None:
            clauses.append("r.grade_id=%s")
            params.append(int(grade_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT s.student_code, u.first_name, u.last_name, u.email, u.phone,
                       g.name AS grade_name, c.name AS class_name, c.section,
                       b.name AS branch_name, r.registration_number, e.enrollment_date
                FROM registrations r
                JOIN students s ON s.student_id = r.student_id
                JOIN users u ON u.user_id = s.user_id
                JOIN grades g ON g.grade_id = r.grade_id
                JOIN branches b ON b.branch_id = r.branch_id
                JOIN enrollments e ON e.student_id = r.student_id AND e.academic_year_id = r.academic_year_id
                JOIN classes c ON c.class_id = e.class_id
                WHERE {" AND ".join(clauses)}
                ORDER BY g.level, c.name, c.section, u.last_name, u.first_name
                """,
                tuple(params),
            )
            return fetchall(cur)
