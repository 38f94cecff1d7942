from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus, DayType, Granularity

_COUNT_FIELDS = {
    AttendanceStatus.PRESENT: "present",
    AttendanceStatus.ABSENT: "absent",
    AttendanceStatus.HALF_DAY: "half_day",
    AttendanceStatus.LATE: "late",
    AttendanceStatus.EARLY_DEPARTURE: "early_departure",
    AttendanceStatus.HOLIDAY: "holiday",
    AttendanceStatus.WEEK_OFF: "week_off",
    AttendanceStatus.ON_LEAVE: "on_leave",
}


@dataclass
class StatusCounts:
    present: int = 0
    absent: int = 0
    half_day: int = 0
    late: int = 0
    early_departure: int = 0
    holiday: int = 0
    week_off: int = 0
    on_leave: int = 0

    def add(self, status: AttendanceStatus) -> None:
        name = _COUNT_FIELDS[status]
        setattr(self, name, getattr(self, name) + 1)

    @classmethod
    def of(cls, records: Iterable[AttendanceRecord]) -> "StatusCounts":
        counts = cls()
        for r in records:
            counts.add(r.status)
        return counts

    @property
    def attended(self) -> int:
        """Days the employee actually showed up, whatever the derived status."""
        return self.present + self.late + self.half_day + self.early_departure

    @property
    def total(self) -> int:
        return sum(getattr(self, name) for name in _COUNT_FIELDS.values())

    def to_dict(self) -> dict:
        return {status.value: getattr(self, name) for status, name in _COUNT_FIELDS.items()}


@dataclass(frozen=True)
class TrendBucket:
    label: str
    start: date
    end: date
    working_days: int
    counts: StatusCounts
    total_hours: float
    attendance_rate: float

    def to_dict(self) -> dict:
        return {
            "period": self.label,
            "start_date": self.start.isoformat(),
            "end_date": self.end.isoformat(),
            "working_days": self.working_days,
            "counts": self.counts.to_dict(),
            "total_hours": round(self.total_hours, 2),
            "attendance_rate": self.attendance_rate,
        }


@dataclass(frozen=True)
class OvertimeAnalysis:
    total_overtime: float = 0.0
    average_overtime: float = 0.0
    max_overtime: float = 0.0
    overtime_days: int = 0

    @classmethod
    def of(cls, records: Iterable[AttendanceRecord]) -> "OvertimeAnalysis":
        hours = [r.overtime_hours for r in records if r.overtime_hours > 0]
        if not hours:
            return cls()
        total = sum(hours)
        return cls(
            total_overtime=round(total, 2),
            average_overtime=round(total / len(hours), 2),
            max_overtime=round(max(hours), 2),
            overtime_days=len(hours),
        )

    def to_dict(self) -> dict:
        return {
            "total_overtime": self.total_overtime,
            "average_overtime": self.average_overtime,
            "max_overtime": self.max_overtime,
            "overtime_days": self.overtime_days,
        }


@dataclass(frozen=True)
class ReportScope:
    """Who a summary covers: one employee, a team leader's team, or everyone active."""

    employee_id: Optional[int] = None
    team_leader_id: Optional[int] = None

    @classmethod
    def employee(cls, employee_id: int) -> "ReportScope":
        return cls(employee_id=int(employee_id))

    @classmethod
    def team(cls, team_leader_id: int) -> "ReportScope":
        return cls(team_leader_id=int(team_leader_id))

    @classmethod
    def organization(cls) -> "ReportScope":
        return cls()

    @property
    def kind(self) -> str:
        if self.employee_id is not None:
            return "employee"
        if self.team_leader_id is not None:
            return "team"
        return "organization"


@dataclass(frozen=True)
class AttendanceSummary:
    scope: ReportScope
    start: date
    end: date
    granularity: Granularity
    employee_count: int
    counts: StatusCounts
    working_days: int
    total_hours: float
    total_overtime: float
    average_hours_per_day: float
    attendance_rate: float
    punctuality_rate: float
    consistency_score: float
    improvement: float
    overtime: OvertimeAnalysis
    trend: list[TrendBucket] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "scope": self.scope.kind,
            "period": {"start_date": self.start.isoformat(), "end_date": self.end.isoformat()},
            "granularity": self.granularity.value,
            "employee_count": self.employee_count,
            "counts": self.counts.to_dict(),
            "working_days": self.working_days,
            "total_hours": round(self.total_hours, 2),
            "total_overtime": round(self.total_overtime, 2),
            "average_hours_per_day": self.average_hours_per_day,
            "attendance_rate": self.attendance_rate,
            "punctuality_rate": self.punctuality_rate,
            "consistency_score": self.consistency_score,
            "improvement": self.improvement,
            "overtime_analysis": self.overtime.to_dict(),
            "trend": [b.to_dict() for b in self.trend],
        }


NOT_RECORDED = "Not Recorded"
FUTURE = "Future"
BEFORE_JOINING = "Not Joined"


@dataclass(frozen=True)
class CalendarDay:
    day: date
    day_type: DayType
    status: str
    record: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict:
        r = self.record
        return {
            "date": self.day.isoformat(),
            "day_type": self.day_type.value,
            "status": self.status,
            "punch_in": r.punch_in.timestamp.strftime("%H:%M") if r and r.punch_in else None,
            "punch_out": r.punch_out.timestamp.strftime("%H:%M") if r and r.punch_out else None,
            "total_work_hours": round(r.total_work_hours, 2) if r else 0,
            "overtime_hours": round(r.overtime_hours, 2) if r else 0,
        }


@dataclass(frozen=True)
class CalendarMonth:
    employee_id: int
    year: int
    month: int
    days: list[CalendarDay]
    counts: StatusCounts
    working_days: int
    total_hours: float
    attendance_rate: float

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "year": self.year,
            "month": self.month,
            "days": [d.to_dict() for d in self.days],
            "summary": {
                "counts": self.counts.to_dict(),
                "working_days": self.working_days,
                "total_hours": round(self.total_hours, 2),
                "attendance_rate": self.attendance_rate,
            },
        }
