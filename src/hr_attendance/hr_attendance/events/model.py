from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import EventType


@dataclass(frozen=True)
class Event:
    """Office calendar event. Holidays block HR-assisted punch-in."""

    event_id: int
    title: str
    event_type: EventType
    start_date: date
    end_date: date
    office_location_id: int

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
