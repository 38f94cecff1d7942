from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Event


class EventRepository(Protocol):
    def find_holiday(self, *, office_location_id: int, day: date) -> Optional[Event]:
        """Holiday for the office whose inclusive date range contains ``day``."""

        raise NotImplementedError

    def list_holidays(self, *, office_location_id: int, start: date, end: date) -> Sequence[Event]:
        """Holidays for the office overlapping [start, end]."""

        raise NotImplementedError
