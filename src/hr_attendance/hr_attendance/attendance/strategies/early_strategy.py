from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, WorkMetrics


class EarlyDepartureStrategy(AttendanceStrategy):
    """Punched out well before the shift end."""

    def decide(self, metrics: WorkMetrics) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.EARLY_DEPARTURE)
