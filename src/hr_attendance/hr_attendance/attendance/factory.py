from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import (
    EARLY_DEPARTURE_THRESHOLD_MINUTES,
    HALF_DAY_THRESHOLD_HOURS,
    LATE_THRESHOLD_MINUTES,
)
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy, WorkMetrics
from .strategies.early_strategy import EarlyDepartureStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the status strategy; rules are checked in order, first match wins."""

    late_threshold_minutes: float = LATE_THRESHOLD_MINUTES
    early_departure_threshold_minutes: float = EARLY_DEPARTURE_THRESHOLD_MINUTES
    half_day_threshold_hours: float = HALF_DAY_THRESHOLD_HOURS

    def for_metrics(self, metrics: WorkMetrics) -> AttendanceStrategy:
        if not metrics.has_punch_in:
            return AbsentStrategy()
        if metrics.late_minutes > self.late_threshold_minutes:
            return LateStrategy()
        if metrics.early_departure_minutes > self.early_departure_threshold_minutes:
            return EarlyDepartureStrategy()
        if metrics.total_work_hours < self.half_day_threshold_hours:
            return HalfDayStrategy()
        return PresentStrategy()
