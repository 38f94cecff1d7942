from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from math import ceil
from typing import Generic, Mapping, Optional, Sequence, TypeVar

from ..common.datetime_utils import parse_iso_date
from ..core.constants import DEFAULT_HISTORY_DAYS, DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.enums import AttendanceStatus, SortOrder
from ..core.exceptions import ValidationError
from ..offices.model import OfficeLocation
from ..shifts.model import WorkShift

# Public sort key -> column in the attendance listing query.
SORTABLE_FIELDS: dict[str, str] = {
    "date": "ar.work_date",
    "punch_in": "ar.punch_in_time",
    "punch_out": "ar.punch_out_time",
    "total_work_hours": "ar.total_work_hours",
    "overtime_hours": "ar.overtime_hours",
    "status": "ar.status",
}

T = TypeVar("T")


@dataclass(frozen=True)
class AttendanceQuery:
    """Every supported listing filter.

    ``employee_ids`` restricts to a set of employees (None = no restriction,
    empty tuple = nothing matches). Other filters are ANDed together.
    """

    start: date
    end: date
    employee_ids: Optional[tuple[int, ...]] = None
    status: Optional[AttendanceStatus] = None
    department_id: Optional[int] = None
    office_location_id: Optional[int] = None
    shift_id: Optional[int] = None
    search: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT
    sort_by: str = "date"
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError("start_date must not be after end_date")
        if self.page < 1:
            raise ValidationError("page must be at least 1")
        if not 1 <= self.limit <= MAX_PAGE_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")
        if self.sort_by not in SORTABLE_FIELDS:
            raise ValidationError(f"sort_by must be one of: {', '.join(sorted(SORTABLE_FIELDS))}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def sort_column(self) -> str:
        return SORTABLE_FIELDS[self.sort_by]

    @classmethod
    def from_args(
        cls,
        args: Mapping[str, str],
        *,
        today: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> "AttendanceQuery":
        """Build a query from request arguments.

        Without both ``start_date`` and ``end_date`` the window is the trailing
        30 days. A filter value of ``All`` means no filter.
        """

        start_s = args.get("start_date")
        end_s = args.get("end_date")
        try:
            if start_s and end_s:
                start, end = parse_iso_date(start_s), parse_iso_date(end_s)
            else:
                start, end = today - timedelta(days=DEFAULT_HISTORY_DAYS), today
        except ValueError:
            raise ValidationError("Dates must use the YYYY-MM-DD format")

        status_s = _filter_value(args.get("status"))
        try:
            status = AttendanceStatus(status_s) if status_s else None
        except ValueError:
            raise ValidationError(f"Unknown status: {status_s}")

        sort_order_s = (args.get("sort_order") or SortOrder.DESC.value).lower()
        try:
            sort_order = SortOrder(sort_order_s)
        except ValueError:
            raise ValidationError("sort_order must be 'asc' or 'desc'")

        return cls(
            start=start,
            end=end,
            employee_ids=tuple(int(i) for i in employee_ids) if employee_ids is not None else None,
            status=status,
            department_id=_optional_int(args.get("department"), "department"),
            office_location_id=_optional_int(args.get("office_location"), "office_location"),
            shift_id=_optional_int(args.get("shift"), "shift"),
            search=(args.get("search") or "").strip() or None,
            page=_int_or_default(args.get("page"), DEFAULT_PAGE, "page"),
            limit=_int_or_default(args.get("limit"), DEFAULT_PAGE_LIMIT, "limit"),
            sort_by=args.get("sort_by") or "date",
            sort_order=sort_order,
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT
    total: int = 0

    @property
    def pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


def _filter_value(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value == "All":
        return None
    return value


def _optional_int(value: Optional[str], field_name: str) -> Optional[int]:
    value = _filter_value(value)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{field_name} is invalid")


def _int_or_default(value: Optional[str], default: int, field_name: str) -> int:
    if value is None or not str(value).strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{field_name} is invalid")


@dataclass(frozen=True)
class FilterOptions:
    """Choices a listing screen can offer, with record counts per status."""

    department_ids: Sequence[int]
    offices: Sequence[OfficeLocation]
    shifts: Sequence[WorkShift]
    status_counts: Mapping[str, int]

    def to_dict(self) -> dict:
        return {
            "department_ids": list(self.department_ids),
            "office_locations": [o.to_dict() for o in self.offices],
            "shifts": [s.to_dict() for s in self.shifts],
            "statuses": [s.value for s in AttendanceStatus],
            "status_counts": {s.value: int(self.status_counts.get(s.value, 0)) for s in AttendanceStatus},
        }
