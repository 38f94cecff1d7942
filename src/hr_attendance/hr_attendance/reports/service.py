from __future__ import annotations

import statistics
from datetime import date, timedelta
from typing import Optional, Sequence, Union

import structlog

from ..attendance.day_classifier import DayClassifier
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import add_months, days_in_month, iter_days, now_local
from ..core.enums import DayType, Granularity, SummaryPeriod
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .calculator.base import AttendanceRateCalculator
from .calculator.standard_calculator import StandardAttendanceRateCalculator
from .model import (
    BEFORE_JOINING,
    FUTURE,
    NOT_RECORDED,
    AttendanceSummary,
    CalendarDay,
    CalendarMonth,
    OvertimeAnalysis,
    ReportScope,
    StatusCounts,
    TrendBucket,
)


def resolve_period(period: Union[str, SummaryPeriod], today: date) -> tuple[date, date]:
    """Map a named period to an inclusive (start, end) window ending today."""
    try:
        period = SummaryPeriod(period)
    except ValueError:
        raise ValidationError(f"Unknown period: {period}")

    if period == SummaryPeriod.TODAY:
        return today, today
    if period == SummaryPeriod.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if period == SummaryPeriod.WEEK:
        return today - timedelta(days=7), today
    if period == SummaryPeriod.MONTH:
        return add_months(today, -1), today
    if period == SummaryPeriod.QUARTER:
        return add_months(today, -3), today
    return add_months(today, -12), today


def current_month_range(today: date) -> tuple[date, date]:
    return today.replace(day=1), today


def split_buckets(start: date, end: date, granularity: Granularity) -> list[tuple[str, date, date]]:
    """Cut [start, end] into labelled daily, ISO-week or calendar-month buckets."""
    buckets: list[tuple[str, date, date]] = []
    cursor = start
    while cursor <= end:
        if granularity == Granularity.DAILY:
            bucket_end = cursor
            label = cursor.isoformat()
        elif granularity == Granularity.WEEKLY:
            bucket_end = min(end, cursor + timedelta(days=6 - cursor.weekday()))
            iso_year, iso_week, _ = cursor.isocalendar()
            label = f"{iso_year}-W{iso_week:02d}"
        else:
            bucket_end = min(end, cursor.replace(day=days_in_month(cursor.year, cursor.month)))
            label = f"{cursor.year}-{cursor.month:02d}"
        buckets.append((label, cursor, bucket_end))
        cursor = bucket_end + timedelta(days=1)
    return buckets


class AttendanceReportService:
    """Read-only summaries, trends and calendar views over stored attendance."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        day_classifier: DayClassifier,
        calculator: Optional[AttendanceRateCalculator] = None,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._days = day_classifier
        self._calculator = calculator or StandardAttendanceRateCalculator()
        self._log = logger or structlog.get_logger(__name__)

    def _employees_for(self, scope: ReportScope) -> list[Employee]:
        if scope.employee_id is not None:
            employee = self._employees.get_by_id(scope.employee_id)
            if not employee:
                raise NotFoundError("Employee not found")
            return [employee]
        if scope.team_leader_id is not None:
            return list(self._employees.list_team(scope.team_leader_id))
        return list(self._employees.list_active())

    def _working_days(self, employees: Sequence[Employee], start: date, end: date) -> dict[int, set[date]]:
        """Working days per employee: weekdays from the join date on, minus office holidays."""
        by_office: dict[Optional[int], set[date]] = {}
        result: dict[int, set[date]] = {}
        for e in employees:
            if e.office_location_id not in by_office:
                by_office[e.office_location_id] = set(self._days.working_days(e.office_location_id, start, end))
            result[e.employee_id] = {d for d in by_office[e.office_location_id] if d >= e.date_of_joining}
        return result

    def summarize(
        self,
        scope: ReportScope,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        period: Optional[Union[str, SummaryPeriod]] = None,
        granularity: Union[str, Granularity] = Granularity.MONTHLY,
        today: Optional[date] = None,
    ) -> AttendanceSummary:
        today = today or now_local().date()
        try:
            granularity = Granularity(granularity)
        except ValueError:
            raise ValidationError(f"Unknown granularity: {granularity}")

        if start is None or end is None:
            start, end = resolve_period(period, today) if period else current_month_range(today)
        if start > end:
            raise ValidationError("start_date must not be after end_date")

        employees = self._employees_for(scope)
        employee_ids = [e.employee_id for e in employees]
        records: Sequence[AttendanceRecord] = (
            self._attendance.list_range(start=start, end=end, employee_ids=employee_ids) if employee_ids else []
        )
        working = self._working_days(employees, start, end)
        # Off-day punches count towards hours but never towards the rate.
        rated = [r for r in records if r.work_date in working.get(r.employee_id, ())]

        trend: list[TrendBucket] = []
        for label, b_start, b_end in split_buckets(start, end, granularity):
            in_bucket = [r for r in records if b_start <= r.work_date <= b_end]
            counts = StatusCounts.of(in_bucket)
            rated_counts = StatusCounts.of([r for r in rated if b_start <= r.work_date <= b_end])
            bucket_days = sum(1 for days in working.values() for d in days if b_start <= d <= b_end)
            trend.append(
                TrendBucket(
                    label=label,
                    start=b_start,
                    end=b_end,
                    working_days=bucket_days,
                    counts=counts,
                    total_hours=sum(r.total_work_hours for r in in_bucket),
                    attendance_rate=self._calculator.rate(rated_counts, bucket_days),
                )
            )

        counts = StatusCounts.of(records)
        working_days = sum(len(days) for days in working.values())
        total_hours = sum(r.total_work_hours for r in records)
        total_overtime = sum(r.overtime_hours for r in records)
        attended = counts.attended

        summary = AttendanceSummary(
            scope=scope,
            start=start,
            end=end,
            granularity=granularity,
            employee_count=len(employees),
            counts=counts,
            working_days=working_days,
            total_hours=total_hours,
            total_overtime=total_overtime,
            average_hours_per_day=round(total_hours / attended, 2) if attended else 0.0,
            attendance_rate=self._calculator.rate(StatusCounts.of(rated), working_days),
            punctuality_rate=round((attended - counts.late) / attended * 100, 1) if attended else 0.0,
            consistency_score=consistency_score(trend),
            improvement=improvement(trend),
            overtime=OvertimeAnalysis.of(records),
            trend=trend,
        )
        self._log.debug(
            "attendance_summarized",
            scope=scope.kind,
            start=start.isoformat(),
            end=end.isoformat(),
            records=len(records),
            working_days=working_days,
        )
        return summary

    def calendar(self, employee_id: int, year: int, month: int, *, today: Optional[date] = None) -> CalendarMonth:
        """Day-by-day view of one month.

        Days before the join date and after today are marked but never counted.
        """
        if not 1 <= int(month) <= 12:
            raise ValidationError("month must be between 1 and 12")
        if not 1900 <= int(year) <= 9999:
            raise ValidationError("year is invalid")

        today = today or now_local().date()
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")

        month_start = date(int(year), int(month), 1)
        month_end = date(int(year), int(month), days_in_month(int(year), int(month)))
        window_start = max(employee.date_of_joining, month_start)
        window_end = min(today, month_end)

        records = {
            r.work_date: r
            for r in self._attendance.list_range(start=month_start, end=month_end, employee_ids=[employee.employee_id])
        }
        day_types = self._days.classify_range(employee.office_location_id, month_start, month_end)

        days: list[CalendarDay] = []
        for day in iter_days(month_start, month_end):
            day_type = day_types[day]
            record = records.get(day)
            if day < employee.date_of_joining:
                status = BEFORE_JOINING
            elif day > today:
                status = FUTURE
            elif record:
                status = record.status.value
            elif day_type == DayType.WORKING_DAY:
                status = NOT_RECORDED
            else:
                status = day_type.value
            days.append(CalendarDay(day=day, day_type=day_type, status=status, record=record))

        counted = [r for d, r in records.items() if window_start <= d <= window_end]
        counts = StatusCounts.of(counted)
        working = {d for d, t in day_types.items() if t == DayType.WORKING_DAY and window_start <= d <= window_end}
        working_days = len(working)
        rated_counts = StatusCounts.of([r for r in counted if r.work_date in working])
        return CalendarMonth(
            employee_id=employee.employee_id,
            year=int(year),
            month=int(month),
            days=days,
            counts=counts,
            working_days=working_days,
            total_hours=sum(r.total_work_hours for r in counted),
            attendance_rate=self._calculator.rate(rated_counts, working_days),
        )


def consistency_score(trend: Sequence[TrendBucket]) -> float:
    """100 minus the population standard deviation of bucket rates, floored at 0."""
    rates = [b.attendance_rate for b in trend if b.working_days > 0]
    if not rates:
        return 0.0
    return round(max(0.0, 100 - statistics.pstdev(rates)), 1)


def improvement(trend: Sequence[TrendBucket]) -> float:
    """Relative change between the first and last bucket rate, in percent."""
    rates = [b.attendance_rate for b in trend if b.working_days > 0]
    if len(rates) < 2 or rates[0] <= 0:
        return 0.0
    return round((rates[-1] - rates[0]) / rates[0] * 100, 1)
