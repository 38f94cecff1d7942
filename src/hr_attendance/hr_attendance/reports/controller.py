from __future__ import annotations

from datetime import timedelta
from typing import Optional

from flask import Flask, request

from ..attendance.query import AttendanceQuery
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import current_employee_id, current_role, login_required, ok
from ..container import Container
from ..core.enums import Granularity, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import ReportScope

RECENT_DAYS = 7
RECENT_RECORDS_LIMIT = 5


def _int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    value = request.args.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} is invalid")


def _date_range() -> tuple:
    start_s = request.args.get("start_date")
    end_s = request.args.get("end_date")
    if not (start_s and end_s):
        return None, None
    try:
        return parse_iso_date(start_s), parse_iso_date(end_s)
    except ValueError:
        raise ValidationError("Dates must use the YYYY-MM-DD format")


def register(app: Flask, container: Container) -> None:
    reports = container.report_service
    attendance = container.attendance_service

    def _resolve_scope() -> ReportScope:
        role = current_role()
        me = current_employee_id()
        kind = (request.args.get("scope") or "employee").lower()

        if kind == "organization":
            if role != Role.HR_MANAGER:
                raise AuthorizationError("Access denied. HR Manager role required.")
            return ReportScope.organization()
        if kind == "team":
            if role == Role.HR_MANAGER:
                return ReportScope.team(_int_arg("team_leader_id", me))
            if role == Role.TEAM_LEADER:
                return ReportScope.team(me)
            raise AuthorizationError("Access denied. Team Leader or HR Manager role required.")
        if kind == "employee":
            employee_id = _int_arg("employee_id", me)
            attendance.ensure_can_view(current_employee_id=me, current_role=role, employee_id=employee_id)
            return ReportScope.employee(employee_id)
        raise ValidationError("scope must be one of: employee, team, organization")

    def _summary(scope: ReportScope):
        start, end = _date_range()
        return reports.summarize(
            scope,
            start=start,
            end=end,
            period=request.args.get("period"),
            granularity=request.args.get("granularity") or Granularity.MONTHLY.value,
        )

    def _calendar(employee_id: int):
        today = now_local().date()
        return reports.calendar(
            employee_id,
            _int_arg("year", today.year),
            _int_arg("month", today.month),
            today=today,
        )

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def summary():
        return ok(_summary(_resolve_scope()).to_dict())

    @app.route("/api/attendance/my-summary", methods=["GET"], endpoint="attendance_my_summary")
    @login_required
    def my_summary():
        return ok(_summary(ReportScope.employee(current_employee_id())).to_dict())

    @app.route("/api/attendance/my-calendar", methods=["GET"], endpoint="attendance_my_calendar")
    @login_required
    def my_calendar():
        return ok(_calendar(current_employee_id()).to_dict())

    @app.route("/api/attendance/<int:employee_id>/details", methods=["GET"], endpoint="attendance_employee_details")
    @login_required
    def employee_details(employee_id: int):
        """Records, summary or calendar for one employee, depending on ``type``."""
        employee = attendance.ensure_can_view(
            current_employee_id=current_employee_id(),
            current_role=current_role(),
            employee_id=employee_id,
        )
        kind = (request.args.get("type") or "records").lower()

        if kind == "records":
            query = AttendanceQuery.from_args(
                request.args,
                today=now_local().date(),
                employee_ids=[employee.employee_id],
            )
            page = attendance.list_records(query)
            return ok(
                [item.to_dict() for item in page.items],
                employee=employee.to_dict(),
                pagination=page.pagination(),
            )
        if kind == "summary":
            return ok(_summary(ReportScope.employee(employee.employee_id)).to_dict(), employee=employee.to_dict())
        if kind == "calendar":
            return ok(_calendar(employee.employee_id).to_dict(), employee=employee.to_dict())
        raise ValidationError("type must be one of: records, summary, calendar")

    @app.route("/api/attendance/my-overview", methods=["GET"], endpoint="attendance_my_overview")
    @login_required
    def my_overview():
        """Today, recent records, the period summary and the last week of the calendar in one call."""
        me = current_employee_id()
        today = now_local().date()
        employee = attendance.ensure_can_view(current_employee_id=me, current_role=current_role(), employee_id=me)

        recent = attendance.list_records(
            AttendanceQuery(
                start=today - timedelta(days=RECENT_DAYS),
                end=today,
                employee_ids=(me,),
                limit=RECENT_RECORDS_LIMIT,
            )
        )
        summary = reports.summarize(
            ReportScope.employee(me),
            period=request.args.get("period") or "month",
            granularity=request.args.get("granularity") or Granularity.MONTHLY.value,
            today=today,
        )
        calendar = _calendar(me)
        past_days = [d for d in calendar.days if d.day <= today][-RECENT_DAYS:]

        return ok(
            {
                "today": attendance.get_today(me).to_dict(),
                "recent_records": [item.to_dict() for item in recent.items],
                "last_punch": recent.items[0].to_dict() if recent.items else None,
                "summary": summary.to_dict(),
                "calendar": [d.to_dict() for d in past_days],
            },
            employee=employee.to_dict(),
        )
