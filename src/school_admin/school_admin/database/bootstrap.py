from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


@dataclass(frozen=True)
class DemoUser:
    email: str
    password: str
    first_name: str
    last_name: str
    role: str
    branch_id: Optional[int]
    phone: Optional[str] = None


DEMO_USERS = (
    DemoUser("admin@school.test", "admin123", "Super", "Admin", "SUPER_ADMIN", None),
    DemoUser("branch.admin@school.test", "branch123", "Main", "Admin", "BRANCH_ADMIN", 1),
    DemoUser("registrar@school.test", "registrar123", "Meron", "Tadesse", "REGISTRAR", 1),
    DemoUser("cashier@school.test", "cashier123", "Abel", "Kebede", "CASHIER", 1),
)


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "school_admin_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "use_pure": True,
    }
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: Path) -> None:
    target = _as_target(db_config)
    sql = _strip_comments(_strip_create_db_and_use(path.read_text(encoding="utf-8")))
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_script(db_config, Path(schema_path))
    logger.info("Applied schema %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_script(db_config, Path(seed_path))
    logger.info("Applied seed %s", seed_path)


def ensure_demo_users(db_config: dict, users: Iterable[DemoUser] = DEMO_USERS) -> None:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)
        for user in users:
            password_hash = generate_password_hash(user.password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (user.email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET first_name=%s, last_name=%s, password_hash=%s, role=%s,
                        school_id=1, branch_id=%s, phone=%s, is_active=1
                    WHERE email=%s
                    """,
                    (user.first_name, user.last_name, password_hash, user.role, user.branch_id, user.phone, user.email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (email, password_hash, first_name, last_name, phone, role, school_id, branch_id)
                    VALUES (%s, %s, %s, %s, %s, %s, 1, %s)
                    """,
                    (user.email, password_hash, user.first_name, user.last_name, user.phone, user.role, user.branch_id),
                )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
