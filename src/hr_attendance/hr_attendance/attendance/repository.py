from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from .model import AttendanceListItem, AttendanceRecord
from .query import AttendanceQuery, Page


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> int:
        """Insert a new day record and return its id.

        Raises ConflictError when a record for (employee, date) already exists.
        """

        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> bool:
        raise NotImplementedError

    def search(self, query: AttendanceQuery) -> Page[AttendanceListItem]:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with ``start <= work_date <= end``, ordered by date (read-only)."""

        raise NotImplementedError

    def count_by_status(self, *, employee_ids: Optional[Sequence[int]] = None) -> Mapping[str, int]:
        """Record count per status value across all dates."""

        raise NotImplementedError
