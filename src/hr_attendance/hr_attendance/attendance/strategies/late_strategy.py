from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, WorkMetrics


class LateStrategy(AttendanceStrategy):
    """Late punch-in; wins over any punch-out outcome."""

    def decide(self, metrics: WorkMetrics) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)
