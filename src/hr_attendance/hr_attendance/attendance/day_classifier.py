from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.datetime_utils import is_weekend, iter_days
from ..core.enums import DayType
from ..employees.model import Employee
from ..events.repository import EventRepository


class DayClassifier:
    """Classify a calendar day for an employee as Working Day, Holiday or Week Off.

    Weekends follow a fixed Saturday/Sunday rule. Holidays are office-scoped
    ``Holiday`` events whose inclusive date range contains the day.
    """

    def __init__(self, events: EventRepository):
        self._events = events

    def classify(self, employee: Employee, day: date) -> DayType:
        if is_weekend(day):
            return DayType.WEEK_OFF

        if employee.office_location_id is not None:
            holiday = self._events.find_holiday(office_location_id=employee.office_location_id, day=day)
            if holiday:
                return DayType.HOLIDAY

        return DayType.WORKING_DAY

    def holidays_between(self, office_location_id: Optional[int], start: date, end: date) -> set[date]:
        if office_location_id is None or start > end:
            return set()
        days: set[date] = set()
        for event in self._events.list_holidays(office_location_id=office_location_id, start=start, end=end):
            days.update(d for d in iter_days(max(event.start_date, start), min(event.end_date, end)))
        return days

    def classify_range(self, office_location_id: Optional[int], start: date, end: date) -> dict[date, DayType]:
        holidays = self.holidays_between(office_location_id, start, end)
        result: dict[date, DayType] = {}
        for day in iter_days(start, end):
            if is_weekend(day):
                result[day] = DayType.WEEK_OFF
            elif day in holidays:
                result[day] = DayType.HOLIDAY
            else:
                result[day] = DayType.WORKING_DAY
        return result

    def working_days(self, office_location_id: Optional[int], start: date, end: date) -> list[date]:
        return [d for d, t in self.classify_range(office_location_id, start, end).items() if t == DayType.WORKING_DAY]
