from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Protocol

import mysql.connector
from mysql.connector.constants import ClientFlag

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class TransactionManager(Protocol):
    def transaction(self, *, lock_timeout_seconds: Optional[int] = None) -> Any:
        """Context manager: everything inside commits together or not at all."""

        raise NotImplementedError


class DatabaseConnection:
    """DB connection factory injected into every repository.

    Outside a transaction each repository call gets a short-lived connection.
    Inside ``transaction()`` all calls made by the current thread share one
    connection, committed once at the end of the block.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            # rowcount reports matched rows, so guarded UPDATEs can be checked reliably.
            client_flags=[ClientFlag.FOUND_ROWS],
        )

    def active_connection(self):
        return getattr(self._local, "conn", None)

    @contextmanager
    def transaction(self, *, lock_timeout_seconds: Optional[int] = None) -> Iterator[Any]:
        active = self.active_connection()
        if active is not None:
            # Nested block joins the outer transaction.
            yield active
            return

        conn = self.connect()
        try:
            if lock_timeout_seconds:
                cur = conn.cursor()
                try:
                    cur.execute("SET SESSION innodb_lock_wait_timeout = %s", (int(lock_timeout_seconds),))
                finally:
                    cur.close()
            conn.start_transaction()
            self._local.conn = conn
            try:
                yield conn
                conn.commit()
            except Exception:
                logger.warning("Transaction rolled back")
                conn.rollback()
                raise
            finally:
                self._local.conn = None
        finally:
            conn.close()
