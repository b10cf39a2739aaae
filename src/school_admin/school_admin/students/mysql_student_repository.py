from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ParentContact, Student
from .repository import StudentRepository


def _to_parent(row: Dict[str, Any]) -> ParentContact:
    return ParentContact(
        parent_user_id=int(row["user_id"]),
        full_name=f"{row['first_name']} {row['last_name']}".strip(),
        phone=row.get("phone"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.student_id, s.student_code, s.user_id, s.branch_id, s.grade_id, s.admission_date,
                       u.first_name, u.last_name, u.email, u.phone,
                       b.name AS branch_name, g.name AS grade_name
                FROM students s
                JOIN users u ON u.user_id = s.user_id
                JOIN branches b ON b.branch_id = s.branch_id
                JOIN grades g ON g.grade_id = s.grade_id
                WHERE s.student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Student(
                student_id=int(r["student_id"]),
                student_code=r["student_code"],
                user_id=int(r["user_id"]),
                first_name=r["first_name"],
                last_name=r["last_name"],
                branch_id=int(r["branch_id"]),
                grade_id=int(r["grade_id"]),
                branch_name=r["branch_name"],
                grade_name=r["grade_name"],
                email=r.get("email"),
                phone=r.get("phone"),
                admission_date=r.get("admission_date"),
            )

    def get_primary_parent(self, student_id: int) -> Optional[ParentContact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.first_name, u.last_name, u.phone
                FROM student_parents sp
                JOIN users u ON u.user_id = sp.parent_user_id
                WHERE sp.student_id=%s
                ORDER BY sp.is_primary DESC, u.user_id
                LIMIT 1
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            return _to_parent(r) if r else None

    def get_parent(self, parent_user_id: int) -> Optional[ParentContact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, first_name, last_name, phone FROM users WHERE user_id=%s AND role='PARENT'",
                (int(parent_user_id),),
            )
            r = fetchone(cur)
            return _to_parent(r) if r else None

    def set_admission_date(self, student_id: int, *, admitted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET admission_date=%s WHERE student_id=%s",
                (admitted_at, int(student_id)),
            )
            return cur.rowcount == 1
