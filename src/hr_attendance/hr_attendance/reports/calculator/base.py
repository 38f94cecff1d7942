from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import StatusCounts


class AttendanceRateCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance rate weighting)."""

    @abstractmethod
    def credited_days(self, counts: StatusCounts) -> float:
        raise NotImplementedError

    def rate(self, counts: StatusCounts, working_days: int) -> float:
        """Percentage of working days credited, one decimal; 0 without working days."""
        if working_days <= 0:
            return 0.0
        return round(self.credited_days(counts) / working_days * 100, 1)
