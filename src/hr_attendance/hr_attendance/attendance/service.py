from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional

import structlog

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_coordinates
from ..core.constants import EARLY_DEPARTURE_REASON_MAX_LENGTH
from ..core.enums import DayType, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, PolicyViolation, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..geofence.validator import GeoValidator
from ..offices.repository import OfficeLocationRepository
from ..shifts.model import WorkShift
from ..shifts.repository import WorkShiftRepository
from .correction import AttendanceCorrection
from .day_classifier import DayClassifier
from .deriver import AttendanceStatusDeriver
from .model import AttendanceListItem, AttendanceRecord, Coordinates, PunchEvent, TodayAttendance
from .query import AttendanceQuery, FilterOptions, Page
from .repository import AttendanceRepository

ALREADY_PUNCHED_IN = "You have already punched in for today"
ALREADY_PUNCHED_OUT = "You have already punched out for today"
NO_PUNCH_IN = "No punch in found for today"

CORRECTION_ROLES = (Role.HR_MANAGER, Role.TEAM_LEADER)


class AttendanceService:
    """Punch-in/punch-out orchestration and the attendance record lifecycle.

    Per (employee, day): no record -> punched in -> complete. Every punch runs the
    status deriver before persisting; manual corrections bypass it.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        offices: OfficeLocationRepository,
        shifts: WorkShiftRepository,
        *,
        geo: GeoValidator,
        day_classifier: DayClassifier,
        deriver: Optional[AttendanceStatusDeriver] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._offices = offices
        self._shifts = shifts
        self._geo = geo
        self._days = day_classifier
        self._deriver = deriver or AttendanceStatusDeriver()
        self._log = logger or structlog.get_logger(__name__)

    # -- lookups -----------------------------------------------------------

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _resolve_shift(self, shift_id: Optional[int]) -> Optional[WorkShift]:
        if shift_id is None:
            return None
        return self._shifts.get_by_id(shift_id)

    @staticmethod
    def _require_office(employee: Employee) -> int:
        if employee.office_location_id is None:
            raise ValidationError("No office location assigned to employee")
        return employee.office_location_id

    # -- persistence -------------------------------------------------------

    def _save(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.attendance_id is None:
            attendance_id = self._attendance.create(record)
            return replace(record, attendance_id=attendance_id)
        self._attendance.update(record)
        return record

    def _start_day(
        self,
        *,
        employee: Employee,
        existing: Optional[AttendanceRecord],
        work_date: date,
        punch: PunchEvent,
    ) -> AttendanceRecord:
        if existing is not None:
            # HR may have created the day by hand without a punch-in.
            return replace(existing, punch_in=punch, is_within_office_location=True)
        return AttendanceRecord(
            attendance_id=None,
            employee_id=employee.employee_id,
            work_date=work_date,
            punch_in=punch,
            office_location_id=employee.office_location_id,
            shift_id=employee.work_shift_id,
            is_within_office_location=True,
        )

    # -- self-service punches ---------------------------------------------

    def punch_in(self, employee_id: int, *, latitude: Any, longitude: Any, now: Optional[datetime] = None) -> AttendanceRecord:
        lat, lng = require_coordinates(latitude, longitude)
        now = now or now_local()
        today = now.date()

        employee = self._require_employee(employee_id)
        office_id = self._require_office(employee)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if existing and existing.is_punched_in:
            raise ConflictError(ALREADY_PUNCHED_IN)

        check = self._geo.check(lat, lng, office_id)
        if not check.within_range:
            self._log.info("punch_in_rejected", employee_id=employee.employee_id, reason=check.reason)
            raise PolicyViolation(
                "Punch in Service is available only inside the office",
                debug_info=check.debug_info(lat, lng),
            )

        record = self._start_day(
            employee=employee,
            existing=existing,
            work_date=today,
            punch=PunchEvent(timestamp=now, coordinates=Coordinates(lat, lng)),
        )
        record = self._deriver.derive(record, self._resolve_shift(record.shift_id))
        record = self._save_punch_in(record)

        self._log.info(
            "punch_in_recorded",
            employee_id=employee.employee_id,
            attendance_id=record.attendance_id,
            work_date=today.isoformat(),
            status=record.status.value,
        )
        return record

    def punch_out(
        self,
        employee_id: int,
        *,
        latitude: Any,
        longitude: Any,
        early_departure_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        lat, lng = require_coordinates(latitude, longitude)
        reason = optional_text(early_departure_reason, "early_departure_reason", max_length=EARLY_DEPARTURE_REASON_MAX_LENGTH)
        now = now or now_local()

        record = self._open_record(int(employee_id), now.date())

        check = self._geo.check(lat, lng, record.office_location_id)
        if not check.within_range:
            self._log.info("punch_out_rejected", employee_id=record.employee_id, reason=check.reason)
            raise PolicyViolation(
                "Punch out Service is available only inside the office",
                debug_info=check.debug_info(lat, lng),
            )

        record = self._finish_day(record, PunchEvent(timestamp=now, coordinates=Coordinates(lat, lng)), reason)
        self._log.info(
            "punch_out_recorded",
            employee_id=record.employee_id,
            attendance_id=record.attendance_id,
            total_work_hours=round(record.total_work_hours, 2),
            status=record.status.value,
        )
        return record

    def _open_record(self, employee_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_employee_and_date(employee_id, work_date)
        if not record or not record.is_punched_in:
            raise NotFoundError(NO_PUNCH_IN)
        if record.is_complete:
            raise ConflictError(ALREADY_PUNCHED_OUT)
        return record

    def _finish_day(self, record: AttendanceRecord, punch: PunchEvent, reason: Optional[str]) -> AttendanceRecord:
        if punch.timestamp <= record.punch_in.timestamp:
            raise ValidationError("Punch out time must be after punch in time")

        record = replace(record, punch_out=punch, is_within_office_location=True)
        if reason:
            record = replace(record, early_departure_reason=reason)
        record = self._deriver.derive(record, self._resolve_shift(record.shift_id))
        return self._save(record)

    def _save_punch_in(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            return self._save(record)
        except ConflictError:
            # Lost a race on the (employee, date) unique key.
            self._log.info("punch_in_conflict", employee_id=record.employee_id, work_date=record.work_date.isoformat())
            raise ConflictError(ALREADY_PUNCHED_IN)

    # -- HR-assisted punches ------------------------------------------------

    def punch_in_by_hr(
        self,
        *,
        current_role: Role,
        employee_id: int,
        punch_in_time: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Punch an employee in on their behalf, using the office's own coordinates."""
        if current_role != Role.HR_MANAGER:
            raise AuthorizationError("Access denied. HR Manager role required.")

        timestamp = punch_in_time or now or now_local()
        work_date = timestamp.date()

        employee = self._require_employee(employee_id)
        office_id = self._require_office(employee)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if existing and existing.is_punched_in:
            raise ConflictError(ALREADY_PUNCHED_IN)

        day_type = self._days.classify(employee, work_date)
        if day_type != DayType.WORKING_DAY:
            raise PolicyViolation(f"Cannot punch in on {day_type.value}")

        office = self._offices.get_by_id(office_id)
        if not office:
            raise NotFoundError("Office location not found")

        check = self._geo.check(office.latitude, office.longitude, office_id)
        if not check.within_range:
            raise PolicyViolation(
                "Punch in Service is available only inside the office",
                debug_info=check.debug_info(office.latitude, office.longitude),
            )

        record = self._start_day(
            employee=employee,
            existing=existing,
            work_date=work_date,
            punch=PunchEvent(timestamp=timestamp, coordinates=Coordinates(office.latitude, office.longitude)),
        )
        record = self._deriver.derive(record, self._resolve_shift(record.shift_id))
        record = self._save_punch_in(record)

        self._log.info(
            "punch_in_by_hr_recorded",
            employee_id=employee.employee_id,
            attendance_id=record.attendance_id,
            work_date=work_date.isoformat(),
            status=record.status.value,
        )
        return record

    def punch_out_by_hr(
        self,
        *,
        current_role: Role,
        employee_id: int,
        punch_out_time: Optional[datetime] = None,
        work_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        if current_role != Role.HR_MANAGER:
            raise AuthorizationError("Access denied. HR Manager role required.")

        timestamp = punch_out_time or now or now_local()
        record = self._open_record(int(employee_id), work_date or timestamp.date())

        office = self._offices.get_by_id(record.office_location_id)
        if not office:
            raise NotFoundError("Office location not found")

        check = self._geo.check(office.latitude, office.longitude, record.office_location_id)
        if not check.within_range:
            raise PolicyViolation(
                "Punch out Service is available only inside the office",
                debug_info=check.debug_info(office.latitude, office.longitude),
            )

        punch = PunchEvent(timestamp=timestamp, coordinates=Coordinates(office.latitude, office.longitude))
        record = self._finish_day(record, punch, None)
        self._log.info(
            "punch_out_by_hr_recorded",
            employee_id=record.employee_id,
            attendance_id=record.attendance_id,
            status=record.status.value,
        )
        return record

    # -- manual correction -------------------------------------------------

    def correct(
        self,
        *,
        current_role: Role,
        attendance_id: int,
        correction: AttendanceCorrection,
        corrected_by: Optional[int] = None,
    ) -> AttendanceRecord:
        """Overwrite a record in place. The status deriver is not consulted.

        When punch times change, work hours and overtime are recomputed unless the
        correction sets them explicitly.
        """
        if current_role not in CORRECTION_ROLES:
            raise AuthorizationError(
                "Access denied. Only HR Managers and Team Leaders can update attendance."
            )

        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")

        if correction.punch_in is not None:
            record = replace(record, punch_in=correction.punch_in.merge_into(record.punch_in))
        if correction.punch_out is not None:
            record = replace(record, punch_out=correction.punch_out.merge_into(record.punch_out))

        if record.punch_out is not None:
            if record.punch_in is None:
                raise ValidationError("A punch out requires a punch in")
            if record.punch_out.timestamp <= record.punch_in.timestamp:
                raise ValidationError("Punch out time must be after punch in time")

        if correction.changes_punches:
            total, overtime = self._deriver.work_hours(record)
            record = replace(record, total_work_hours=total, overtime_hours=overtime)

        updates: dict[str, Any] = {}
        for name in ("status", "early_departure_minutes", "total_work_hours", "overtime_hours"):
            value = getattr(correction, name)
            if value is not None:
                updates[name] = value
        if correction.changes_reason:
            updates["early_departure_reason"] = correction.early_departure_reason
        record = replace(record, **updates)

        self._attendance.update(record)
        self._log.info(
            "attendance_corrected",
            attendance_id=record.attendance_id,
            employee_id=record.employee_id,
            corrected_by=corrected_by,
            fields=correction.changed_fields(),
        )
        return record

    # -- reads -------------------------------------------------------------

    def get_today(self, employee_id: int, *, now: Optional[datetime] = None) -> TodayAttendance:
        today = (now or now_local()).date()
        record = self._attendance.get_for_employee_and_date(int(employee_id), today)
        if record:
            return TodayAttendance(record=record, day_status="Attendance Recorded")

        employee = self._require_employee(employee_id)
        day_type = self._days.classify(employee, today)
        if day_type != DayType.WORKING_DAY:
            return TodayAttendance(record=None, day_status=day_type.value, message=f"Today is {day_type.value}")
        return TodayAttendance(
            record=None,
            day_status="Working Day - Not Punched In",
            message="No attendance record for today",
        )

    def list_records(self, query: AttendanceQuery) -> Page[AttendanceListItem]:
        return self._attendance.search(query)

    def ensure_can_view(self, *, current_employee_id: int, current_role: Role, employee_id: int) -> Employee:
        """HR sees everyone, Team Leaders their team and themselves, employees only themselves."""
        employee = self._require_employee(employee_id)
        if current_role == Role.HR_MANAGER or int(current_employee_id) == employee.employee_id:
            return employee
        if current_role == Role.TEAM_LEADER and employee.manager_id == int(current_employee_id):
            return employee
        raise AuthorizationError("Access denied. You can only view your own attendance records.")

    def visible_employee_ids(self, *, current_employee_id: int, current_role: Role) -> Optional[list[int]]:
        """Employee ids a listing may cover for this viewer (None means everyone)."""
        if current_role == Role.HR_MANAGER:
            return None
        if current_role == Role.TEAM_LEADER:
            team = [e.employee_id for e in self._employees.list_team(int(current_employee_id))]
            return [int(current_employee_id), *team]
        raise AuthorizationError("Access denied. Team Leader or HR Manager role required.")

    def filter_options(self, *, current_employee_id: int, current_role: Role) -> FilterOptions:
        visible = self.visible_employee_ids(current_employee_id=current_employee_id, current_role=current_role)
        if visible is None:
            employees = list(self._employees.list_active())
        else:
            employees = [e for e in (self._employees.get_by_id(i) for i in visible) if e]
        return FilterOptions(
            department_ids=sorted({e.department_id for e in employees if e.department_id is not None}),
            offices=list(self._offices.list_all()),
            shifts=list(self._shifts.list_active()),
            status_counts=self._attendance.count_by_status(employee_ids=visible),
        )
