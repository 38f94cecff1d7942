from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

import mysql.connector
import structlog

from .connection import DBConfig

logger = structlog.get_logger(__name__)

_CREATE_DB_RE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB_RE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def _strip_database_directives(sql: str) -> str:
    # schema.sql works against whatever database DB_CONFIG names.
    return _USE_DB_RE.sub("", _CREATE_DB_RE.sub("", sql))


def split_sql_statements(sql: str) -> Iterable[str]:
    """Split a schema file on ';' while respecting quoted literals."""
    statement: list[str] = []
    quote: str | None = None
    escaped = False

    for ch in sql:
        statement.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            text = "".join(statement[:-1]).strip()
            statement.clear()
            if text:
                yield text

    tail = "".join(statement).strip()
    if tail:
        yield tail


def _connect(config: DBConfig, *, with_database: bool = True):
    params = {
        "host": config.host,
        "port": int(config.port),
        "user": config.user,
        "password": config.password,
        "connection_timeout": int(config.connect_timeout),
        "use_pure": True,
    }
    if with_database:
        params["database"] = config.database
    return mysql.connector.connect(**params)


def ensure_database_exists(config: DBConfig) -> None:
    conn = _connect(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(config: DBConfig, *, schema_path: str | Path) -> None:
    """Create the attendance tables (idempotent: CREATE TABLE IF NOT EXISTS)."""
    ensure_database_exists(config)
    sql = _strip_database_directives(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(config)
    try:
        cur = conn.cursor()
        for statement in split_sql_statements(sql):
            cur.execute(statement)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema_applied", database=config.database, schema=str(schema_path))


def list_tables(config: DBConfig) -> list[str]:
    conn = _connect(config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
