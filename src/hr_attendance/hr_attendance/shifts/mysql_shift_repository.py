from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import parse_hhmm
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import WorkShift
from .repository import WorkShiftRepository

_COLUMNS = "shift_id, name, start_time, end_time, status"


def _to_shift(r: Dict[str, Any]) -> WorkShift:
    return WorkShift(
        shift_id=int(r["shift_id"]),
        name=r["name"],
        start_time=parse_hhmm(r["start_time"]),
        end_time=parse_hhmm(r["end_time"]),
        is_active=r.get("status", "Active") == "Active",
    )


class MySQLWorkShiftRepository(WorkShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[WorkShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def list_active(self) -> Sequence[WorkShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_shifts WHERE status='Active' ORDER BY name")
            return [_to_shift(r) for r in fetchall(cur)]
