from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import EnrollmentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Enrollment
from .repository import EnrollmentRepository

_COLUMNS = "enrollment_id, student_id, class_id, branch_id, academic_year_id, enrollment_date, status"


def _to_enrollment(r: Dict[str, Any]) -> Enrollment:
    return Enrollment(
        enrollment_id=int(r["enrollment_id"]),
        student_id=int(r["student_id"]),
        class_id=int(r["class_id"]),
        branch_id=int(r["branch_id"]),
        academic_year_id=int(r["academic_year_id"]),
        enrollment_date=r["enrollment_date"],
        status=EnrollmentStatus(r["status"]),
    )


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, enrollment_id: int) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM enrollments WHERE enrollment_id=%s", (int(enrollment_id),))
            r = fetchone(cur)
            return _to_enrollment(r) if r else None

    def get_active_for_student(self, student_id: int) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM enrollments WHERE student_id=%s AND status=%s ORDER BY enrollment_id DESC LIMIT 1",
                (int(student_id), EnrollmentStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _to_enrollment(r) if r else None

    def count_active_in_class(self, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM enrollments WHERE class_id=%s AND status=%s",
                (int(class_id), EnrollmentStatus.ACTIVE.value),
            )
            return int(fetchone(cur)["n"])

    def create(
        self,
        *,
        student_id: int,
        class_id: int,
        branch_id: int,
        academic_year_id: int,
        enrollment_date: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO enrollments(student_id, class_id, branch_id, academic_year_id, enrollment_date, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    int(class_id),
                    int(branch_id),
                    int(academic_year_id),
                    enrollment_date,
                    EnrollmentStatus.ACTIVE.value,
                ),
            )
            return int(cur.lastrowid)

    def deactivate(self, enrollment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE enrollments SET status=%s WHERE enrollment_id=%s AND status=%s",
                (EnrollmentStatus.INACTIVE.value, int(enrollment_id), EnrollmentStatus.ACTIVE.value),
            )
            return cur.rowcount == 1
