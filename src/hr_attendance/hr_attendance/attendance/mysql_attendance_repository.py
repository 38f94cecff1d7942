from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import parse_hhmm
from ..core.enums import AttendanceStatus, OfficeType, Role
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_entry, normalize_mysql_date, optional_float
from ..employees.model import Employee
from ..offices.model import OfficeLocation
from ..shifts.model import WorkShift
from .model import AttendanceListItem, AttendanceRecord, Coordinates, PunchEvent
from .query import AttendanceQuery, Page
from .repository import AttendanceRepository

_COLUMNS = """
    ar.attendance_id, ar.employee_id, ar.work_date,
    ar.punch_in_time, ar.punch_in_latitude, ar.punch_in_longitude,
    ar.punch_out_time, ar.punch_out_latitude, ar.punch_out_longitude,
    ar.total_work_hours, ar.overtime_hours, ar.status,
    ar.early_departure_minutes, ar.early_departure_reason,
    ar.shift_id, ar.office_location_id, ar.is_within_office_location
"""

_LISTING_JOINS = """
    FROM attendance_records ar
    JOIN employees e ON e.employee_id = ar.employee_id
    LEFT JOIN work_shifts ws ON ws.shift_id = ar.shift_id
    LEFT JOIN office_locations ol ON ol.office_location_id = ar.office_location_id
"""


def _punch(r: Dict[str, Any], prefix: str) -> Optional[PunchEvent]:
    timestamp = r.get(f"{prefix}_time")
    if timestamp is None:
        return None
    lat = optional_float(r.get(f"{prefix}_latitude"))
    lng = optional_float(r.get(f"{prefix}_longitude"))
    coords = Coordinates(lat, lng) if lat is not None and lng is not None else None
    return PunchEvent(timestamp=timestamp, coordinates=coords)


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=normalize_mysql_date(r["work_date"]),
        punch_in=_punch(r, "punch_in"),
        punch_out=_punch(r, "punch_out"),
        office_location_id=int(r["office_location_id"]),
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
        total_work_hours=float(r.get("total_work_hours") or 0),
        overtime_hours=float(r.get("overtime_hours") or 0),
        status=AttendanceStatus(r["status"]),
        early_departure_minutes=float(r.get("early_departure_minutes") or 0),
        early_departure_reason=r.get("early_departure_reason"),
        is_within_office_location=bool(r.get("is_within_office_location")),
    )


def _to_list_item(r: Dict[str, Any]) -> AttendanceListItem:
    record = _to_record(r)
    employee = Employee(
        employee_id=record.employee_id,
        employee_code=r["employee_code"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        role=Role(r["role"]),
        date_of_joining=normalize_mysql_date(r["date_of_joining"]),
        office_location_id=r.get("e_office_location_id"),
        work_shift_id=r.get("work_shift_id"),
        manager_id=r.get("manager_id"),
        department_id=r.get("department_id"),
    )
    shift = None
    if r.get("shift_name") is not None:
        shift = WorkShift(
            shift_id=record.shift_id,
            name=r["shift_name"],
            start_time=parse_hhmm(r["shift_start_time"]),
            end_time=parse_hhmm(r["shift_end_time"]),
        )
    office = None
    if r.get("office_name") is not None:
        office = OfficeLocation(
            office_location_id=record.office_location_id,
            office_name=r["office_name"],
            office_address=r.get("office_address") or "",
            latitude=optional_float(r.get("office_latitude")),
            longitude=optional_float(r.get("office_longitude")),
            office_type=OfficeType(r.get("office_type") or OfficeType.OFFICE.value),
        )
    return AttendanceListItem(record=record, employee=employee, shift=shift, office=office)


def _row_values(record: AttendanceRecord) -> tuple:
    def parts(punch: Optional[PunchEvent]) -> tuple:
        if punch is None:
            return (None, None, None)
        coords = punch.coordinates
        return (
            punch.timestamp,
            coords.latitude if coords else None,
            coords.longitude if coords else None,
        )

    return (
        *parts(record.punch_in),
        *parts(record.punch_out),
        float(record.total_work_hours),
        float(record.overtime_hours),
        record.status.value,
        float(record.early_departure_minutes),
        record.early_departure_reason,
        record.shift_id,
        record.office_location_id,
        int(bool(record.is_within_office_location)),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.employee_id=%s AND ar.work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date,
                        punch_in_time, punch_in_latitude, punch_in_longitude,
                        punch_out_time, punch_out_latitude, punch_out_longitude,
                        total_work_hours, overtime_hours, status,
                        early_departure_minutes, early_departure_reason,
                        shift_id, office_location_id, is_within_office_location
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(record.employee_id), record.work_date, *_row_values(record)),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_entry(exc):
                    raise ConflictError("Attendance already recorded for this employee and date") from exc
                raise
            return int(cur.lastrowid)

    def update(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET punch_in_time=%s, punch_in_latitude=%s, punch_in_longitude=%s,
                    punch_out_time=%s, punch_out_latitude=%s, punch_out_longitude=%s,
                    total_work_hours=%s, overtime_hours=%s, status=%s,
                    early_departure_minutes=%s, early_departure_reason=%s,
                    shift_id=%s, office_location_id=%s, is_within_office_location=%s
                WHERE attendance_id=%s
                """,
                (*_row_values(record), int(record.attendance_id)),
            )
            return cur.rowcount > 0

    def search(self, query: AttendanceQuery) -> Page[AttendanceListItem]:
        if query.employee_ids is not None and not query.employee_ids:
            return Page(items=[], page=query.page, limit=query.limit, total=0)

        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [query.start, query.end]

        if query.employee_ids is not None:
            clauses.append(f"ar.employee_id IN ({', '.join(['%s'] * len(query.employee_ids))})")
            params.extend(query.employee_ids)
        if query.status is not None:
            clauses.append("ar.status=%s")
            params.append(query.status.value)
        if query.department_id is not None:
            clauses.append("e.department_id=%s")
            params.append(query.department_id)
        if query.office_location_id is not None:
            clauses.append("ar.office_location_id=%s")
            params.append(query.office_location_id)
        if query.shift_id is not None:
            clauses.append("ar.shift_id=%s")
            params.append(query.shift_id)
        if query.search:
            clauses.append("(e.first_name LIKE %s OR e.last_name LIKE %s OR e.employee_code LIKE %s)")
            term = f"%{query.search}%"
            params.extend([term, term, term])

        where = " AND ".join(clauses)
        # sort_column and sort_order come from whitelists, never from raw input.
        order = f"{query.sort_column} {query.sort_order.value.upper()}, ar.attendance_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total {_LISTING_JOINS} WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS},
                    e.employee_code, e.first_name, e.last_name, e.role, e.date_of_joining,
                    e.office_location_id AS e_office_location_id, e.work_shift_id,
                    e.manager_id, e.department_id,
                    ws.name AS shift_name, ws.start_time AS shift_start_time, ws.end_time AS shift_end_time,
                    ol.office_name, ol.office_address, ol.latitude AS office_latitude,
                    ol.longitude AS office_longitude, ol.office_type
                {_LISTING_JOINS}
                WHERE {where}
                ORDER BY {order}
                LIMIT %s OFFSET %s
                """,
                (*params, query.limit, query.offset),
            )
            items = [_to_list_item(r) for r in fetchall(cur)]

        return Page(items=items, page=query.page, limit=query.limit, total=total)

    def list_range(
        self,
        *,
        start: date,
        end: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if employee_ids is not None:
            if not employee_ids:
                return []
            clauses.append(f"ar.employee_id IN ({', '.join(['%s'] * len(employee_ids))})")
            params.extend(int(i) for i in employee_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE {' AND '.join(clauses)}
                ORDER BY ar.work_date ASC, ar.employee_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_by_status(self, *, employee_ids: Optional[Sequence[int]] = None) -> Dict[str, int]:
        where = ""
        params: tuple = ()
        if employee_ids is not None:
            if not employee_ids:
                return {}
            where = f"WHERE employee_id IN ({', '.join(['%s'] * len(employee_ids))})"
            params = tuple(int(i) for i in employee_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT status, COUNT(*) AS total FROM attendance_records {where} GROUP BY status", params)
            return {r["status"]: int(r["total"]) for r in fetchall(cur)}
