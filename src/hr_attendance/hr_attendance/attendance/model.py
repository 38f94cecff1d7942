from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from ..employees.model import Employee
from ..offices.model import OfficeLocation
from ..shifts.model import WorkShift


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class PunchEvent:
    timestamp: datetime
    coordinates: Optional[Coordinates] = None

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
        }


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per employee per calendar day.

    ``punch_in`` is only absent on rows HR created by hand; the normal flow
    always creates a record with its punch-in.
    """

    attendance_id: Optional[int]
    employee_id: int
    work_date: date
    punch_in: Optional[PunchEvent]
    office_location_id: int
    shift_id: Optional[int] = None
    punch_out: Optional[PunchEvent] = None
    total_work_hours: float = 0.0
    overtime_hours: float = 0.0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    early_departure_minutes: float = 0.0
    early_departure_reason: Optional[str] = None
    is_within_office_location: bool = False

    @property
    def is_punched_in(self) -> bool:
        return self.punch_in is not None

    @property
    def is_complete(self) -> bool:
        return self.punch_out is not None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "punch_in": self.punch_in.to_dict() if self.punch_in else None,
            "punch_out": self.punch_out.to_dict() if self.punch_out else None,
            "total_work_hours": self.total_work_hours,
            "overtime_hours": self.overtime_hours,
            "status": self.status.value,
            "early_departure_minutes": self.early_departure_minutes,
            "early_departure_reason": self.early_departure_reason,
            "shift_id": self.shift_id,
            "office_location_id": self.office_location_id,
            "is_within_office_location": self.is_within_office_location,
        }


@dataclass(frozen=True)
class AttendanceListItem:
    """Read-model for listings: a record with its references resolved."""

    record: AttendanceRecord
    employee: Optional[Employee] = None
    shift: Optional[WorkShift] = None
    office: Optional[OfficeLocation] = None

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["employee"] = self.employee.to_dict() if self.employee else {"employee_id": self.record.employee_id}
        data["shift"] = self.shift.to_dict() if self.shift else None
        data["office_location"] = self.office.to_dict() if self.office else None
        return data


@dataclass(frozen=True)
class TodayAttendance:
    record: Optional[AttendanceRecord]
    day_status: str
    message: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "attendance": self.record.to_dict() if self.record else None,
            "day_status": self.day_status,
        }
        if self.message:
            data["message"] = self.message
        if self.record:
            data["work_summary"] = {
                "total_hours": self.record.total_work_hours,
                "overtime_hours": self.record.overtime_hours,
                "status": self.record.status.value,
            }
        return data
