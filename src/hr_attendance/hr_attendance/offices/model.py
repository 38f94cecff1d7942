from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import OfficeType


@dataclass(frozen=True)
class OfficeLocation:
    """Domain entity: an office with the coordinates used for geofencing."""

    office_location_id: int
    office_name: str
    office_address: str
    latitude: Optional[float]
    longitude: Optional[float]
    office_type: OfficeType = OfficeType.OFFICE
    branch_code: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "office_location_id": self.office_location_id,
            "office_name": self.office_name,
            "office_address": self.office_address,
        }
