from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from ..common.money import to_money
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import PricingSchema
from .repository import PricingRepository

_SELECT = """
    SELECT p.pricing_id, p.school_id, p.branch_id, p.grade_id,
           p.registration_fee, p.monthly_fee, p.service_fee, p.is_active, p.updated_at,
           b.name AS branch_name, g.name AS grade_name
    FROM pricing_schemas p
    JOIN branches b ON b.branch_id = p.branch_id
    JOIN grades g ON g.grade_id = p.grade_id
"""


def _to_schema(r: Dict[str, Any]) -> PricingSchema:
    return PricingSchema(
        pricing_id=int(r["pricing_id"]),
        school_id=int(r["school_id"]),
        branch_id=int(r["branch_id"]),
        grade_id=int(r["grade_id"]),
        registration_fee=to_money(r["registration_fee"]),
        monthly_fee=to_money(r["monthly_fee"]),
        service_fee=to_money(r["service_fee"]),
        is_active=bool(r["is_active"]),
        branch_name=r.get("branch_name") or "",
        grade_name=r.get("grade_name") or "",
        updated_at=r.get("updated_at"),
    )


class MySQLPricingRepository(PricingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self, *, branch_id: int, grade_id: int) -> Optional[PricingSchema]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE p.branch_id=%s AND p.grade_id=%s AND p.is_active=1",
                (int(branch_id), int(grade_id)),
            )
            r = fetchone(cur)
            return _to_schema(r) if r else None

    def upsert(
        self,
        *,
        school_id: int,
        branch_id: int,
        grade_id: int,
        registration_fee: Decimal,
        monthly_fee: Decimal,
        service_fee: Decimal,
    ) -> PricingSchema:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pricing_schemas(
                    school_id, branch_id, grade_id, registration_fee, monthly_fee, service_fee, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE
                    registration_fee=VALUES(registration_fee),
                    monthly_fee=VALUES(monthly_fee),
                    service_fee=VALUES(service_fee),
                    is_active=1
                """,
                (int(school_id), int(branch_id), int(grade_id), registration_fee, monthly_fee, service_fee),
            )
            cur.execute(_SELECT + " WHERE p.branch_id=%s AND p.grade_id=%s", (int(branch_id), int(grade_id)))
            return _to_schema(fetchone(cur))
