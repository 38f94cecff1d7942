from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class WorkShift:
    """Domain entity: a work shift with its expected start and end of day."""

    shift_id: int
    name: str
    start_time: time
    end_time: time
    is_active: bool = True

    def to_dict(self) -> dict:
        return {
            "shift_id": self.shift_id,
            "name": self.name,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
        }
