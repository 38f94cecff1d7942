from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional, Sequence

import pytest

from src.hr_attendance.hr_attendance.attendance.model import AttendanceListItem, AttendanceRecord
from src.hr_attendance.hr_attendance.attendance.query import AttendanceQuery, Page
from src.hr_attendance.hr_attendance.container import build_services
from src.hr_attendance.hr_attendance.core.enums import EventType, Role, SortOrder
from src.hr_attendance.hr_attendance.core.exceptions import ConflictError
from src.hr_attendance.hr_attendance.employees.model import Employee
from src.hr_attendance.hr_attendance.events.model import Event
from src.hr_attendance.hr_attendance.offices.model import OfficeLocation
from src.hr_attendance.hr_attendance.shifts.model import WorkShift

OFFICE_LAT = 10.7769
OFFICE_LNG = 106.7009

HR_ID = 1
LEADER_ID = 2
EMPLOYEE_ID = 3
NO_OFFICE_ID = 4
OUTSIDER_ID = 5


class InMemoryEmployees:
    def __init__(self, employees: Sequence[Employee]):
        self._by_id = {e.employee_id: e for e in employees}

    def put(self, employee: Employee) -> None:
        self._by_id[employee.employee_id] = employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(int(employee_id))

    def list_team(self, manager_id: int) -> Sequence[Employee]:
        return [e for e in self._by_id.values() if e.manager_id == int(manager_id) and e.is_active]

    def list_active(self) -> Sequence[Employee]:
        return [e for e in self._by_id.values() if e.is_active]


class InMemoryOffices:
    def __init__(self, offices: Sequence[OfficeLocation]):
        self._by_id = {o.office_location_id: o for o in offices}

    def get_by_id(self, office_location_id: int) -> Optional[OfficeLocation]:
        return self._by_id.get(int(office_location_id))

    def list_all(self) -> Sequence[OfficeLocation]:
        return sorted(self._by_id.values(), key=lambda o: o.office_name)


class InMemoryShifts:
    def __init__(self, shifts: Sequence[WorkShift]):
        self._by_id = {s.shift_id: s for s in shifts}

    def get_by_id(self, shift_id: int) -> Optional[WorkShift]:
        return self._by_id.get(int(shift_id))

    def list_active(self) -> Sequence[WorkShift]:
        return sorted((s for s in self._by_id.values() if s.is_active), key=lambda s: s.name)


class InMemoryEvents:
    def __init__(self, events: Sequence[Event] = ()):
        self.events = list(events)

    def _holidays(self, office_location_id: int):
        return [
            e for e in self.events
            if e.event_type == EventType.HOLIDAY and e.office_location_id == office_location_id
        ]

    def find_holiday(self, *, office_location_id: int, day: date) -> Optional[Event]:
        for e in self._holidays(office_location_id):
            if e.covers(day):
                return e
        return None

    def list_holidays(self, *, office_location_id: int, start: date, end: date) -> Sequence[Event]:
        return [e for e in self._holidays(office_location_id) if e.start_date <= end and e.end_date >= start]


class InMemoryAttendance:
    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id = 0

    @property
    def records(self) -> list[AttendanceRecord]:
        return list(self._by_id.values())

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        """Seed a record directly, bypassing the service."""
        record = replace(record, attendance_id=self.create(record))
        return record

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(int(attendance_id))

    def _find(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._by_id.values():
            if r.employee_id == int(employee_id) and r.work_date == work_date:
                return r
        return None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._find(employee_id, work_date)

    def create(self, record: AttendanceRecord) -> int:
        # Mirrors the (employee_id, work_date) unique key.
        if self._find(record.employee_id, record.work_date):
            raise ConflictError("Attendance already recorded for this employee and date")
        self._id += 1
        self._by_id[self._id] = replace(record, attendance_id=self._id)
        return self._id

    def update(self, record: AttendanceRecord) -> bool:
        if record.attendance_id not in self._by_id:
            return False
        self._by_id[record.attendance_id] = record
        return True

    def search(self, query: AttendanceQuery) -> Page[AttendanceListItem]:
        items = []
        for r in self._by_id.values():
            employee = self._employees.get_by_id(r.employee_id)
            if not query.start <= r.work_date <= query.end:
                continue
            if query.employee_ids is not None and r.employee_id not in query.employee_ids:
                continue
            if query.status is not None and r.status != query.status:
                continue
            if query.department_id is not None and (not employee or employee.department_id != query.department_id):
                continue
            if query.office_location_id is not None and r.office_location_id != query.office_location_id:
                continue
            if query.shift_id is not None and r.shift_id != query.shift_id:
                continue
            if query.search:
                term = query.search.lower()
                haystack = f"{employee.first_name} {employee.last_name} {employee.employee_code}".lower() if employee else ""
                if term not in haystack:
                    continue
            items.append(AttendanceListItem(record=r, employee=employee))

        key = {
            "date": lambda i: i.record.work_date,
            "total_work_hours": lambda i: i.record.total_work_hours,
            "overtime_hours": lambda i: i.record.overtime_hours,
            "status": lambda i: i.record.status.value,
            "punch_in": lambda i: i.record.punch_in.timestamp if i.record.punch_in else datetime.min,
            "punch_out": lambda i: i.record.punch_out.timestamp if i.record.punch_out else datetime.min,
        }[query.sort_by]
        items.sort(key=key, reverse=query.sort_order == SortOrder.DESC)
        return Page(
            items=items[query.offset:query.offset + query.limit],
            page=query.page,
            limit=query.limit,
            total=len(items),
        )

    def list_range(self, *, start: date, end: date, employee_ids: Optional[Sequence[int]] = None):
        out = [
            r for r in self._by_id.values()
            if start <= r.work_date <= end and (employee_ids is None or r.employee_id in employee_ids)
        ]
        out.sort(key=lambda r: (r.work_date, r.employee_id))
        return out

    def count_by_status(self, *, employee_ids: Optional[Sequence[int]] = None) -> dict[str, int]:
        counts: dict[str, int] = {}
        for r in self._by_id.values():
            if employee_ids is None or r.employee_id in employee_ids:
                counts[r.status.value] = counts.get(r.status.value, 0) + 1
        return counts


def make_employee(employee_id: int, role: Role = Role.EMPLOYEE, **overrides) -> Employee:
    data = dict(
        employee_id=employee_id,
        employee_code=f"EMP{employee_id:03d}",
        first_name=f"First{employee_id}",
        last_name=f"Last{employee_id}",
        role=role,
        date_of_joining=date(2025, 1, 1),
        office_location_id=1,
        work_shift_id=1,
        department_id=10,
    )
    data.update(overrides)
    return Employee(**data)


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            make_employee(HR_ID, Role.HR_MANAGER, first_name="Hoa", last_name="Tran"),
            make_employee(LEADER_ID, Role.TEAM_LEADER, first_name="Minh", last_name="Pham"),
            make_employee(EMPLOYEE_ID, manager_id=LEADER_ID, first_name="Lan", last_name="Nguyen"),
            make_employee(NO_OFFICE_ID, manager_id=LEADER_ID, office_location_id=None),
            make_employee(OUTSIDER_ID, department_id=20),
        ]
    )


@pytest.fixture
def offices() -> InMemoryOffices:
    return InMemoryOffices(
        [
            OfficeLocation(1, "Head Office", "1 Le Loi, District 1", OFFICE_LAT, OFFICE_LNG),
            OfficeLocation(2, "Unmapped Branch", "Somewhere", None, None),
        ]
    )


@pytest.fixture
def shifts() -> InMemoryShifts:
    return InMemoryShifts(
        [
            WorkShift(1, "General", time(9, 0), time(18, 0)),
            WorkShift(2, "Part-time afternoon", time(13, 0), time(16, 30)),
        ]
    )


@pytest.fixture
def events() -> InMemoryEvents:
    return InMemoryEvents(
        [
            Event(1, "Lunar New Year", EventType.HOLIDAY, date(2026, 2, 16), date(2026, 2, 20), 1),
            Event(2, "Quarterly town hall", EventType.MEETING, date(2026, 2, 3), date(2026, 2, 3), 1),
        ]
    )


@pytest.fixture
def attendance(employees) -> InMemoryAttendance:
    return InMemoryAttendance(employees)


@pytest.fixture
def container(employees, offices, shifts, events, attendance):
    return build_services(
        employees_repo=employees,
        offices_repo=offices,
        shifts_repo=shifts,
        events_repo=events,
        attendance_repo=attendance,
    )


@pytest.fixture
def service(container):
    return container.attendance_service


@pytest.fixture
def report_service(container):
    return container.report_service
