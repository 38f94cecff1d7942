from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, WorkMetrics


class HalfDayStrategy(AttendanceStrategy):
    def decide(self, metrics: WorkMetrics) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY)
