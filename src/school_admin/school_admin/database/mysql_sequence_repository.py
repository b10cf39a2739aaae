from __future__ import annotations

from ..common.numbering import SequenceRepository
from .connection import DatabaseConnection
from .mysql_base import db_cursor


class MySQLSequenceRepository(SequenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def next_value(self, name: str) -> int:
        # LAST_INSERT_ID(expr) makes the new value readable on this connection only.
        with db_cursor(self._conn_factory, dictionary=False) as (_, cur):
            cur.execute(
                """
                INSERT INTO sequences(name, value) VALUES(%s, LAST_INSERT_ID(1))
                ON DUPLICATE KEY UPDATE value = LAST_INSERT_ID(value + 1)
                """,
                (name,),
            )
            cur.execute("SELECT LAST_INSERT_ID()")
            row = cur.fetchone()
            return int(row[0])
