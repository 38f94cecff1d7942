from __future__ import annotations

from dataclasses import replace
from datetime import datetime, time
from typing import Optional

from ..common.datetime_utils import hours_between
from ..core.constants import DEFAULT_SHIFT_END, DEFAULT_SHIFT_START, STANDARD_SHIFT_HOURS
from ..shifts.model import WorkShift
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .strategies.base import WorkMetrics


class AttendanceStatusDeriver:
    """Compute work hours, overtime, lateness, early departure and status from punches.

    Lateness and early departure are measured against the assigned shift's own
    boundaries on the punch day. 09:00 and 18:00 are only used when the record
    has no resolvable shift. Overtime counts hours beyond a fixed standard day.
    """

    def __init__(
        self,
        *,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        standard_hours: float = STANDARD_SHIFT_HOURS,
        default_start: time = DEFAULT_SHIFT_START,
        default_end: time = DEFAULT_SHIFT_END,
    ):
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._standard_hours = float(standard_hours)
        self._default_start = default_start
        self._default_end = default_end

    def work_hours(self, record: AttendanceRecord) -> tuple[float, float]:
        """(total_work_hours, overtime_hours) for the record's punches."""
        if not record.punch_in or not record.punch_out:
            return 0.0, 0.0
        total = max(0.0, hours_between(record.punch_in.timestamp, record.punch_out.timestamp))
        return total, max(0.0, total - self._standard_hours)

    def measure(self, record: AttendanceRecord, shift: Optional[WorkShift] = None) -> WorkMetrics:
        if not record.punch_in:
            return WorkMetrics(has_punch_in=False, has_punch_out=record.punch_out is not None)

        start_t = shift.start_time if shift else self._default_start
        end_t = shift.end_time if shift else self._default_end

        punch_in_at = record.punch_in.timestamp
        scheduled_start = datetime.combine(punch_in_at.date(), start_t)
        late_minutes = max(0.0, (punch_in_at - scheduled_start).total_seconds() / 60)

        early_minutes = 0.0
        if record.punch_out:
            punch_out_at = record.punch_out.timestamp
            scheduled_end = datetime.combine(punch_out_at.date(), end_t)
            early_minutes = max(0.0, (scheduled_end - punch_out_at).total_seconds() / 60)

        total, overtime = self.work_hours(record)
        return WorkMetrics(
            has_punch_in=True,
            has_punch_out=record.punch_out is not None,
            total_work_hours=total,
            overtime_hours=overtime,
            late_minutes=late_minutes,
            early_departure_minutes=early_minutes,
        )

    def derive(self, record: AttendanceRecord, shift: Optional[WorkShift] = None) -> AttendanceRecord:
        """Return ``record`` with its derived fields recomputed. Runs before every punch persist."""
        metrics = self.measure(record, shift)
        decision = self._factory.for_metrics(metrics).decide(metrics)
        return replace(
            record,
            total_work_hours=metrics.total_work_hours,
            overtime_hours=metrics.overtime_hours,
            early_departure_minutes=(
                metrics.early_departure_minutes if metrics.has_punch_out else record.early_departure_minutes
            ),
            status=decision.status,
        )
