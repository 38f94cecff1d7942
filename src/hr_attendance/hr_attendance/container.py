from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.day_classifier import DayClassifier
from .attendance.deriver import AttendanceStatusDeriver
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_GEOFENCE_RADIUS_METERS
from .database.connection import DatabaseConnection, build_db_config
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .geofence.validator import GeoValidator
from .offices.mysql_office_repository import MySQLOfficeLocationRepository
from .offices.repository import OfficeLocationRepository
from .reports.service import AttendanceReportService
from .shifts.mysql_shift_repository import MySQLWorkShiftRepository
from .shifts.repository import WorkShiftRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    offices_repo: OfficeLocationRepository
    shifts_repo: WorkShiftRepository
    events_repo: EventRepository
    attendance_repo: AttendanceRepository

    geo_validator: GeoValidator
    day_classifier: DayClassifier
    attendance_service: AttendanceService
    report_service: AttendanceReportService


def build_services(
    *,
    employees_repo: EmployeeRepository,
    offices_repo: OfficeLocationRepository,
    shifts_repo: WorkShiftRepository,
    events_repo: EventRepository,
    attendance_repo: AttendanceRepository,
    geofence_radius_m: float = DEFAULT_GEOFENCE_RADIUS_METERS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""
    geo_validator = GeoValidator(offices_repo, radius_m=geofence_radius_m)
    day_classifier = DayClassifier(events_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        offices_repo,
        shifts_repo,
        geo=geo_validator,
        day_classifier=day_classifier,
        deriver=AttendanceStatusDeriver(strategy_factory=AttendanceStrategyFactory()),
    )
    report_service = AttendanceReportService(attendance_repo, employees_repo, day_classifier=day_classifier)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        offices_repo=offices_repo,
        shifts_repo=shifts_repo,
        events_repo=events_repo,
        attendance_repo=attendance_repo,
        geo_validator=geo_validator,
        day_classifier=day_classifier,
        attendance_service=attendance_service,
        report_service=report_service,
    )


def build_container(
    *,
    db_config: dict,
    connect_timeout: Optional[int] = None,
    statement_timeout_ms: Optional[int] = None,
    geofence_radius_m: float = DEFAULT_GEOFENCE_RADIUS_METERS,
) -> Container:
    conn = DatabaseConnection(
        build_db_config(db_config, connect_timeout=connect_timeout, statement_timeout_ms=statement_timeout_ms)
    )
    return build_services(
        employees_repo=MySQLEmployeeRepository(conn),
        offices_repo=MySQLOfficeLocationRepository(conn),
        shifts_repo=MySQLWorkShiftRepository(conn),
        events_repo=MySQLEventRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        geofence_radius_m=geofence_radius_m,
        conn=conn,
    )
