from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, WorkMetrics


class PresentStrategy(AttendanceStrategy):
    """On time, stayed through the shift and worked a full day."""

    def decide(self, metrics: WorkMetrics) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
