from __future__ import annotations

from typing import Any, Optional

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date, parse_iso_datetime
from ..common.http import current_employee_id, current_role, json_body, login_required, ok, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .correction import AttendanceCorrection
from .query import AttendanceQuery


def _timestamp(value: Any, field_name: str):
    if value in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 datetime")


def _date(value: Optional[str], field_name: str):
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must use the YYYY-MM-DD format")


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/punch-in", methods=["POST"], endpoint="attendance_punch_in")
    @login_required
    def punch_in():
        body = json_body()
        record = service.punch_in(
            current_employee_id(),
            latitude=body.get("latitude"),
            longitude=body.get("longitude"),
        )
        return ok(record.to_dict(), status=201, message="Punched in successfully")

    @app.route("/api/attendance/punch-out", methods=["POST"], endpoint="attendance_punch_out")
    @login_required
    def punch_out():
        body = json_body()
        record = service.punch_out(
            current_employee_id(),
            latitude=body.get("latitude"),
            longitude=body.get("longitude"),
            early_departure_reason=body.get("early_departure_reason"),
        )
        return ok(record.to_dict(), message="Punched out successfully")

    @app.route("/api/attendance/<int:employee_id>/punch-in/by-hr", methods=["POST"], endpoint="attendance_punch_in_by_hr")
    @roles_required(Role.HR_MANAGER)
    def punch_in_by_hr(employee_id: int):
        body = json_body()
        record = service.punch_in_by_hr(
            current_role=current_role(),
            employee_id=employee_id,
            punch_in_time=_timestamp(body.get("punch_in_time"), "punch_in_time"),
        )
        return ok(record.to_dict(), status=201, message="Employee punched in successfully")

    @app.route("/api/attendance/<int:employee_id>/punch-out/by-hr", methods=["POST"], endpoint="attendance_punch_out_by_hr")
    @roles_required(Role.HR_MANAGER)
    def punch_out_by_hr(employee_id: int):
        body = json_body()
        record = service.punch_out_by_hr(
            current_role=current_role(),
            employee_id=employee_id,
            punch_out_time=_timestamp(body.get("punch_out_time"), "punch_out_time"),
            work_date=_date(body.get("date"), "date"),
        )
        return ok(record.to_dict(), message="Employee punched out successfully")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        return ok(service.get_today(current_employee_id()).to_dict())

    @app.route("/api/attendance/employee/<int:employee_id>/today", methods=["GET"], endpoint="attendance_employee_today")
    @login_required
    def employee_today(employee_id: int):
        service.ensure_can_view(
            current_employee_id=current_employee_id(),
            current_role=current_role(),
            employee_id=employee_id,
        )
        return ok(service.get_today(employee_id).to_dict())

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @roles_required(Role.HR_MANAGER, Role.TEAM_LEADER)
    def list_attendance():
        """Organisation-wide listing. Team Leaders only see their team and themselves."""
        visible = service.visible_employee_ids(current_employee_id=current_employee_id(), current_role=current_role())

        employee_ids = visible
        requested = request.args.get("employee_id")
        if requested and requested != "All":
            try:
                requested_id = int(requested)
            except ValueError:
                raise ValidationError("employee_id is invalid")
            employee_ids = [requested_id] if visible is None or requested_id in visible else []

        query = AttendanceQuery.from_args(request.args, today=now_local().date(), employee_ids=employee_ids)
        page = service.list_records(query)
        return ok([item.to_dict() for item in page.items], pagination=page.pagination())

    @app.route("/api/attendance/filters", methods=["GET"], endpoint="attendance_filters")
    @roles_required(Role.HR_MANAGER, Role.TEAM_LEADER)
    def attendance_filters():
        options = service.filter_options(current_employee_id=current_employee_id(), current_role=current_role())
        return ok(options.to_dict())

    @app.route("/api/attendance/my-attendances", methods=["GET"], endpoint="attendance_mine")
    @login_required
    def my_attendances():
        query = AttendanceQuery.from_args(
            request.args,
            today=now_local().date(),
            employee_ids=[current_employee_id()],
        )
        page = service.list_records(query)
        return ok([item.to_dict() for item in page.items], pagination=page.pagination())

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_correct")
    @roles_required(Role.HR_MANAGER, Role.TEAM_LEADER)
    def correct(attendance_id: int):
        record = service.correct(
            current_role=current_role(),
            attendance_id=attendance_id,
            correction=AttendanceCorrection.from_payload(json_body()),
            corrected_by=current_employee_id(),
        )
        return ok(record.to_dict(), message="Attendance updated successfully")
