from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import mysql.connector
import structlog

from ..core.exceptions import PersistenceError
from .connection import DatabaseConnection

logger = structlog.get_logger(__name__)

DUPLICATE_ENTRY_ERRNO = 1062


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` inside a transaction.

    Driver failures are logged and re-raised as PersistenceError. Domain errors
    raised by the caller roll the transaction back and propagate unchanged.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("db_connect_failed", errno=getattr(exc, "errno", None), error=str(exc))
        raise PersistenceError("Attendance store is unavailable") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        logger.error("db_statement_failed", errno=getattr(exc, "errno", None), error=str(exc))
        raise PersistenceError("Attendance store operation failed") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def is_duplicate_entry(exc: mysql.connector.Error) -> bool:
    return getattr(exc, "errno", None) == DUPLICATE_ENTRY_ERRNO


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")


def optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)
