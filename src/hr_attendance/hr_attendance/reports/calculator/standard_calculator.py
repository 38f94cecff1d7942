from __future__ import annotations

from ...core.constants import HALF_DAY_WEIGHT
from ..model import StatusCounts
from .base import AttendanceRateCalculator


class StandardAttendanceRateCalculator(AttendanceRateCalculator):
    """Standard rule: present days count fully, half days at 0.5, everything else 0."""

    def credited_days(self, counts: StatusCounts) -> float:
        return counts.present + HALF_DAY_WEIGHT * counts.half_day
