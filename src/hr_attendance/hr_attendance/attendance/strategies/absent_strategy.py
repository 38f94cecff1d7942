from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, WorkMetrics


class AbsentStrategy(AttendanceStrategy):
    """No punch-in recorded for the day."""

    def decide(self, metrics: WorkMetrics) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)
