from dataclasses import replace
from datetime import date, datetime, time, timedelta

import pytest

from src.hr_attendance.hr_attendance.attendance.model import AttendanceRecord, PunchEvent
from src.hr_attendance.hr_attendance.common.datetime_utils import iter_days
from src.hr_attendance.hr_attendance.core.enums import AttendanceStatus, Granularity
from src.hr_attendance.hr_attendance.core.exceptions import NotFoundError, ValidationError
from src.hr_attendance.hr_attendance.reports.model import ReportScope
from src.hr_attendance.hr_attendance.reports.service import current_month_range, resolve_period, split_buckets

WEEK_1 = [date(2026, 2, d) for d in (2, 3, 4, 5, 6)]
WEEK_2 = [date(2026, 2, d) for d in (9, 10, 11, 12, 13)]


def seed(attendance, employee_id: int, day: date, status: AttendanceStatus, hours: float = 8.0, overtime: float = 0.0):
    start = datetime.combine(day, time(9, 0))
    return attendance.add(
        AttendanceRecord(
            attendance_id=None,
            employee_id=employee_id,
            work_date=day,
            punch_in=PunchEvent(start),
            punch_out=PunchEvent(start + timedelta(hours=hours)),
            office_location_id=1,
            shift_id=1,
            total_work_hours=hours,
            overtime_hours=overtime,
            status=status,
        )
    )


def test_summary_counts_hours_and_rate(report_service, attendance):
    for day in WEEK_1 + WEEK_2[:3]:
        seed(attendance, 3, day, AttendanceStatus.PRESENT)
    for day in WEEK_2[3:]:
        seed(attendance, 3, day, AttendanceStatus.HALF_DAY, hours=3.5)

    summary = report_service.summarize(
        ReportScope.employee(3), start=date(2026, 2, 2), end=date(2026, 2, 13), today=date(2026, 2, 13)
    )

    assert summary.working_days == 10
    assert summary.counts.present == 8
    assert summary.counts.half_day == 2
    assert summary.attendance_rate == 90.0
    assert summary.total_hours == pytest.approx(71.0)
    assert summary.average_hours_per_day == pytest.approx(7.1)


def test_summary_rate_monotonic_in_present_and_absent_days(report_service, attendance):
    window = dict(start=date(2026, 2, 2), end=date(2026, 2, 13), today=date(2026, 2, 13))
    for day in WEEK_1[:3]:
        seed(attendance, 3, day, AttendanceStatus.PRESENT)
    base = report_service.summarize(ReportScope.employee(3), **window).attendance_rate

    seed(attendance, 3, WEEK_1[3], AttendanceStatus.PRESENT)
    with_present = report_service.summarize(ReportScope.employee(3), **window).attendance_rate
    seed(attendance, 3, WEEK_1[4], AttendanceStatus.ABSENT, hours=0)
    with_absent = report_service.summarize(ReportScope.employee(3), **window).attendance_rate

    assert with_present >= base
    assert with_absent <= with_present


def test_working_days_exclude_holidays_and_clip_at_join_date(report_service, employees):
    employees.put(replace(employees.get_by_id(3), date_of_joining=date(2026, 2, 11)))

    summary = report_service.summarize(
        ReportScope.employee(3), start=date(2026, 2, 1), end=date(2026, 2, 28), today=date(2026, 2, 28)
    )

    # Feb 11-13 and 23-27; Feb 16-20 is a holiday at office 1.
    assert summary.working_days == 8
    assert summary.attendance_rate == 0.0


def test_weekly_trend_consistency_and_improvement(report_service, attendance):
    for day in WEEK_1:
        seed(attendance, 3, day, AttendanceStatus.PRESENT)
    for day in WEEK_2[:3]:
        seed(attendance, 3, day, AttendanceStatus.PRESENT)

    summary = report_service.summarize(
        ReportScope.employee(3),
        start=date(2026, 2, 2),
        end=date(2026, 2, 13),
        granularity=Granularity.WEEKLY,
        today=date(2026, 2, 13),
    )

    assert [b.label for b in summary.trend] == ["2026-W06", "2026-W07"]
    assert [b.attendance_rate for b in summary.trend] == [100.0, 60.0]
    assert summary.consistency_score == 80.0
    assert summary.improvement == -40.0


def test_consistency_ignores_buckets_without_working_days(report_service, attendance):
    for day in WEEK_1:
        seed(attendance, 3, day, AttendanceStatus.PRESENT)

    summary = report_service.summarize(
        ReportScope.employee(3),
        start=date(2026, 2, 2),
        end=date(2026, 2, 8),
        granularity="daily",
        today=date(2026, 2, 8),
    )

    assert len(summary.trend) == 7
    assert summary.consistency_score == 100.0
    assert summary.improvement == 0.0


def test_punctuality_and_overtime_analysis(report_service, attendance):
    seed(attendance, 3, WEEK_1[0], AttendanceStatus.PRESENT, hours=10, overtime=2)
    seed(attendance, 3, WEEK_1[1], AttendanceStatus.PRESENT, hours=9, overtime=1)
    seed(attendance, 3, WEEK_1[2], AttendanceStatus.PRESENT)
    seed(attendance, 3, WEEK_1[3], AttendanceStatus.LATE, hours=7.5)

    summary = report_service.summarize(
        ReportScope.employee(3), start=date(2026, 2, 2), end=date(2026, 2, 6), today=date(2026, 2, 6)
    )

    assert summary.punctuality_rate == 75.0
    assert summary.overtime.total_overtime == 3.0
    assert summary.overtime.average_overtime == 1.5
    assert summary.overtime.max_overtime == 2.0
    assert summary.overtime.overtime_days == 2
    assert summary.to_dict()["overtime_analysis"]["overtime_days"] == 2


def test_team_scope_sums_members_working_days(report_service, attendance):
    seed(attendance, 3, WEEK_1[0], AttendanceStatus.PRESENT)
    seed(attendance, 4, WEEK_1[0], AttendanceStatus.PRESENT)
    seed(attendance, 5, WEEK_1[0], AttendanceStatus.PRESENT)

    summary = report_service.summarize(
        ReportScope.team(2), start=date(2026, 2, 2), end=date(2026, 2, 6), today=date(2026, 2, 6)
    )

    assert summary.employee_count == 2
    assert summary.working_days == 10
    assert summary.counts.present == 2
    assert summary.attendance_rate == 20.0


def test_organization_scope_covers_all_active(report_service):
    summary = report_service.summarize(ReportScope.organization(), period="today", today=date(2026, 2, 2))

    assert summary.employee_count == 5
    assert summary.working_days == 5


def test_summary_defaults_to_month_to_date(report_service):
    summary = report_service.summarize(ReportScope.employee(3), today=date(2026, 2, 12))

    assert (summary.start, summary.end) == (date(2026, 2, 1), date(2026, 2, 12))


def test_summary_errors(report_service):
    with pytest.raises(NotFoundError):
        report_service.summarize(ReportScope.employee(404), today=date(2026, 2, 12))
    with pytest.raises(ValidationError):
        report_service.summarize(ReportScope.employee(3), period="decade", today=date(2026, 2, 12))
    with pytest.raises(ValidationError):
        report_service.summarize(ReportScope.employee(3), granularity="hourly", today=date(2026, 2, 12))
    with pytest.raises(ValidationError):
        report_service.summarize(
            ReportScope.employee(3), start=date(2026, 2, 12), end=date(2026, 2, 1), today=date(2026, 2, 12)
        )


@pytest.mark.parametrize(
    "period, expected",
    [
        ("today", (date(2026, 3, 31), date(2026, 3, 31))),
        ("yesterday", (date(2026, 3, 30), date(2026, 3, 30))),
        ("week", (date(2026, 3, 24), date(2026, 3, 31))),
        ("month", (date(2026, 2, 28), date(2026, 3, 31))),
        ("quarter", (date(2025, 12, 31), date(2026, 3, 31))),
        ("year", (date(2025, 3, 31), date(2026, 3, 31))),
    ],
)
def test_resolve_period(period, expected):
    assert resolve_period(period, date(2026, 3, 31)) == expected


def test_current_month_range():
    assert current_month_range(date(2026, 2, 12)) == (date(2026, 2, 1), date(2026, 2, 12))


def test_monthly_buckets_are_clipped_to_range():
    buckets = split_buckets(date(2026, 1, 20), date(2026, 3, 5), Granularity.MONTHLY)

    assert [(b[0], b[1], b[2]) for b in buckets] == [
        ("2026-01", date(2026, 1, 20), date(2026, 1, 31)),
        ("2026-02", date(2026, 2, 1), date(2026, 2, 28)),
        ("2026-03", date(2026, 3, 1), date(2026, 3, 5)),
    ]


def test_calendar_clips_at_join_date_and_today(report_service, attendance, employees):
    employees.put(replace(employees.get_by_id(3), date_of_joining=date(2026, 2, 10)))
    seed(attendance, 3, date(2026, 2, 10), AttendanceStatus.PRESENT)
    seed(attendance, 3, date(2026, 2, 12), AttendanceStatus.LATE)

    cal = report_service.calendar(3, 2026, 2, today=date(2026, 2, 12))
    by_day = {d.day: d for d in cal.days}

    assert len(cal.days) == 28
    assert all(by_day[d].status == "Not Joined" for d in iter_days(date(2026, 2, 1), date(2026, 2, 9)))
    assert by_day[date(2026, 2, 10)].status == "Present"
    assert by_day[date(2026, 2, 11)].status == "Not Recorded"
    assert by_day[date(2026, 2, 12)].status == "Late"
    assert by_day[date(2026, 2, 13)].status == "Future"
    assert cal.working_days == 3
    assert cal.attendance_rate == 33.3
    assert cal.to_dict()["days"][9]["punch_in"] == "09:00"


def test_calendar_marks_weekends_and_holidays(report_service):
    cal = report_service.calendar(3, 2026, 2, today=date(2026, 2, 28))
    by_day = {d.day: d for d in cal.days}

    assert by_day[date(2026, 2, 7)].status == "Week Off"
    assert by_day[date(2026, 2, 17)].status == "Holiday"
    assert cal.working_days == 15


@pytest.mark.parametrize("year, month", [(2026, 0), (2026, 13), (1200, 5)])
def test_calendar_rejects_bad_month(report_service, year, month):
    with pytest.raises(ValidationError):
        report_service.calendar(3, year, month, today=date(2026, 2, 28))


def test_weekend_punches_do_not_push_rate_past_100(report_service, attendance):
    for day in iter_days(date(2026, 2, 2), date(2026, 2, 8)):
        seed(attendance, 3, day, AttendanceStatus.PRESENT)

    summary = report_service.summarize(
        ReportScope.employee(3),
        start=date(2026, 2, 2),
        end=date(2026, 2, 8),
        granularity=Granularity.DAILY,
        today=date(2026, 2, 8),
    )

    assert summary.working_days == 5
    assert summary.counts.present == 7
    assert summary.total_hours == pytest.approx(56.0)
    assert summary.attendance_rate == 100.0
    assert all(b.attendance_rate <= 100 for b in summary.trend)
    assert summary.trend[5].attendance_rate == 0.0


def test_calendar_rate_ignores_holiday_punches(report_service, attendance):
    for day in WEEK_1:
        seed(attendance, 3, day, AttendanceStatus.PRESENT)
    seed(attendance, 3, date(2026, 2, 7), AttendanceStatus.PRESENT)
    seed(attendance, 3, date(2026, 2, 16), AttendanceStatus.PRESENT)

    cal = report_service.calendar(3, 2026, 2, today=date(2026, 2, 16))
    by_day = {d.day: d for d in cal.days}

    assert by_day[date(2026, 2, 7)].status == "Present"
    assert cal.working_days == 10
    assert cal.attendance_rate == 50.0
