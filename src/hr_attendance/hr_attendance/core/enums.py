from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles carried by the authenticated employee."""

    HR_MANAGER = "HR_Manager"
    TEAM_LEADER = "Team_Leader"
    EMPLOYEE = "Employee"


class AttendanceStatus(str, Enum):
    """Attendance status values persisted on a record."""

    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    LATE = "Late"
    EARLY_DEPARTURE = "Early Departure"
    HOLIDAY = "Holiday"
    WEEK_OFF = "Week Off"
    ON_LEAVE = "On Leave"


class DayType(str, Enum):
    WORKING_DAY = "Working Day"
    HOLIDAY = "Holiday"
    WEEK_OFF = "Week Off"


class OfficeType(str, Enum):
    REMOTE = "Remote"
    OFFICE = "Office"
    HYBRID = "Hybrid"


class EventType(str, Enum):
    HOLIDAY = "Holiday"
    MEETING = "Meeting"
    TRAINING = "Training"
    CELEBRATION = "Celebration"
    MAINTENANCE = "Maintenance"
    OTHER = "Other"


class SummaryPeriod(str, Enum):
    """Named reporting windows, resolved relative to today."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
