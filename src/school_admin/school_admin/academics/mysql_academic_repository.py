from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AcademicYear, ClassRoom
from .repository import AcademicRepository


class MySQLAcademicRepository(AcademicRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_academic_year(self) -> Optional[AcademicYear]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT academic_year_id, name, start_date, end_date, is_active
                FROM academic_years
                WHERE is_active=1
                ORDER BY start_date DESC
                LIMIT 1
                """
            )
            r = fetchone(cur)
            if not r:
                return None
            return AcademicYear(
                academic_year_id=int(r["academic_year_id"]),
                name=r["name"],
                start_date=r["start_date"],
                end_date=r["end_date"],
                is_active=bool(r["is_active"]),
            )

    def get_class(self, class_id: int) -> Optional[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, branch_id, grade_id, name, section, capacity FROM classes WHERE class_id=%s",
                (int(class_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClassRoom(
                class_id=int(r["class_id"]),
                branch_id=int(r["branch_id"]),
                grade_id=int(r["grade_id"]),
                name=r["name"],
                section=r.get("section"),
                capacity=int(r["capacity"]),
            )
