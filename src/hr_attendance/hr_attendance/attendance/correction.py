from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import as_finite_float, optional_text
from ..core.constants import EARLY_DEPARTURE_REASON_MAX_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .model import Coordinates, PunchEvent

_UNSET: Any = object()


@dataclass(frozen=True)
class PunchPatch:
    """Partial punch update; fields left as None keep their stored value."""

    timestamp: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def merge_into(self, current: Optional[PunchEvent]) -> PunchEvent:
        timestamp = self.timestamp or (current.timestamp if current else None)
        if timestamp is None:
            raise ValidationError("timestamp is required when adding a punch")

        coords = current.coordinates if current else None
        if self.latitude is not None or self.longitude is not None:
            lat = self.latitude if self.latitude is not None else (coords.latitude if coords else None)
            lng = self.longitude if self.longitude is not None else (coords.longitude if coords else None)
            if lat is None or lng is None:
                raise ValidationError("Latitude and longitude are required")
            coords = Coordinates(lat, lng)
        return PunchEvent(timestamp=timestamp, coordinates=coords)

    @classmethod
    def from_payload(cls, payload: Any, field_name: str) -> "PunchPatch":
        if not isinstance(payload, Mapping):
            raise ValidationError(f"{field_name} must be an object")

        timestamp = None
        if payload.get("timestamp"):
            try:
                timestamp = parse_iso_datetime(str(payload["timestamp"]))
            except ValueError:
                raise ValidationError(f"{field_name}.timestamp must be an ISO-8601 datetime")

        coords = payload.get("coordinates") or {}
        if not isinstance(coords, Mapping):
            raise ValidationError(f"{field_name}.coordinates must be an object")
        latitude = _coordinate(coords.get("latitude"), f"{field_name}.coordinates.latitude", 90)
        longitude = _coordinate(coords.get("longitude"), f"{field_name}.coordinates.longitude", 180)
        return cls(timestamp=timestamp, latitude=latitude, longitude=longitude)


@dataclass(frozen=True)
class AttendanceCorrection:
    """Manual HR correction. Only the fields listed here may be changed.

    ``early_departure_reason`` uses a sentinel so that an explicit null clears it.
    """

    status: Optional[AttendanceStatus] = None
    early_departure_minutes: Optional[float] = None
    early_departure_reason: Any = _UNSET
    total_work_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    punch_in: Optional[PunchPatch] = None
    punch_out: Optional[PunchPatch] = None

    @property
    def changes_reason(self) -> bool:
        return self.early_departure_reason is not _UNSET

    @property
    def changes_punches(self) -> bool:
        return self.punch_in is not None or self.punch_out is not None

    def changed_fields(self) -> list[str]:
        fields = [
            name
            for name in ("status", "early_departure_minutes", "total_work_hours", "overtime_hours", "punch_in", "punch_out")
            if getattr(self, name) is not None
        ]
        if self.changes_reason:
            fields.append("early_departure_reason")
        return fields

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AttendanceCorrection":
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")

        status = None
        if payload.get("status") is not None:
            try:
                status = AttendanceStatus(payload["status"])
            except ValueError:
                raise ValidationError(f"Unknown status: {payload['status']}")

        reason: Any = _UNSET
        if "early_departure_reason" in payload:
            reason = optional_text(
                payload["early_departure_reason"],
                "early_departure_reason",
                max_length=EARLY_DEPARTURE_REASON_MAX_LENGTH,
            )

        correction = cls(
            status=status,
            early_departure_minutes=_non_negative(payload.get("early_departure_minutes"), "early_departure_minutes"),
            early_departure_reason=reason,
            total_work_hours=_non_negative(payload.get("total_work_hours"), "total_work_hours"),
            overtime_hours=_non_negative(payload.get("overtime_hours"), "overtime_hours"),
            punch_in=PunchPatch.from_payload(payload["punch_in"], "punch_in") if payload.get("punch_in") else None,
            punch_out=PunchPatch.from_payload(payload["punch_out"], "punch_out") if payload.get("punch_out") else None,
        )
        if not correction.changed_fields():
            raise ValidationError("No correctable fields supplied")
        return correction


def _non_negative(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    number = as_finite_float(value)
    if number is None or number < 0:
        raise ValidationError(f"{field_name} must be a non-negative number")
    return number


def _coordinate(value: Any, field_name: str, bound: int) -> Optional[float]:
    if value is None or value == "":
        return None
    number = as_finite_float(value)
    if number is None or not -bound <= number <= bound:
        raise ValidationError(f"{field_name} must be between -{bound} and {bound}")
    return number
