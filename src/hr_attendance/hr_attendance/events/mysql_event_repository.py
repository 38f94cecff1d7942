from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import EventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Event
from .repository import EventRepository


def _to_event(r: Dict[str, Any]) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        title=r["title"],
        event_type=EventType(r["event_type"]),
        start_date=normalize_mysql_date(r["start_date"]),
        end_date=normalize_mysql_date(r["end_date"]),
        office_location_id=int(r["office_location_id"]),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_holiday(self, *, office_location_id: int, day: date) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, title, event_type, start_date, end_date, office_location_id
                FROM events
                WHERE office_location_id=%s AND event_type=%s AND start_date<=%s AND end_date>=%s
                ORDER BY start_date
                LIMIT 1
                """,
                (int(office_location_id), EventType.HOLIDAY.value, day, day),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_holidays(self, *, office_location_id: int, start: date, end: date) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, title, event_type, start_date, end_date, office_location_id
                FROM events
                WHERE office_location_id=%s AND event_type=%s AND start_date<=%s AND end_date>=%s
                ORDER BY start_date
                """,
                (int(office_location_id), EventType.HOLIDAY.value, end, start),
            )
            return [_to_event(r) for r in fetchall(cur)]
