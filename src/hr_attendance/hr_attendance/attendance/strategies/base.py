from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class WorkMetrics:
    """Measurements taken from a record's punches against its shift."""

    has_punch_in: bool
    has_punch_out: bool
    total_work_hours: float = 0.0
    overtime_hours: float = 0.0
    late_minutes: float = 0.0
    early_departure_minutes: float = 0.0


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide(self, metrics: WorkMetrics) -> StatusDecision:
        raise NotImplementedError
