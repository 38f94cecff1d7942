"""Geofence validation.

Uses the Haversine formula to decide whether a submitted location lies within
the allowed radius around an office's registered coordinates.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..common.validators import as_finite_float
from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS, EARTH_RADIUS_METERS
from ..core.exceptions import PersistenceError
from ..offices.model import OfficeLocation
from ..offices.repository import OfficeLocationRepository


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two latitude/longitude points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


@dataclass(frozen=True)
class GeoCheck:
    within_range: bool
    distance_m: Optional[float]
    radius_m: float
    office: Optional[OfficeLocation] = None
    reason: Optional[str] = None

    def debug_info(self, latitude: Any, longitude: Any) -> dict:
        office = self.office
        return {
            "user_location": {"latitude": latitude, "longitude": longitude},
            "office_location": (
                {
                    "name": office.office_name,
                    "latitude": office.latitude,
                    "longitude": office.longitude,
                    "address": office.office_address,
                }
                if office
                else None
            ),
            "distance_m": round(self.distance_m, 2) if self.distance_m is not None else None,
            "radius_m": self.radius_m,
        }


class GeoValidator:
    """Fail-closed geofence check against an office's registered coordinates."""

    def __init__(
        self,
        offices: OfficeLocationRepository,
        *,
        radius_m: float = DEFAULT_GEOFENCE_RADIUS_METERS,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self._offices = offices
        self._radius_m = float(radius_m)
        self._log = logger or structlog.get_logger(__name__)

    @property
    def radius_m(self) -> float:
        return self._radius_m

    def check(self, latitude: Any, longitude: Any, office_location_id: Optional[int]) -> GeoCheck:
        lat = as_finite_float(latitude)
        lng = as_finite_float(longitude)
        if lat is None or lng is None:
            self._log.debug("geofence_rejected", reason="invalid_user_coordinates", office_location_id=office_location_id)
            return GeoCheck(False, None, self._radius_m, reason="invalid_user_coordinates")

        if office_location_id is None:
            return GeoCheck(False, None, self._radius_m, reason="office_not_assigned")

        try:
            office = self._offices.get_by_id(office_location_id)
        except PersistenceError:
            self._log.warning("geofence_office_lookup_failed", office_location_id=office_location_id)
            return GeoCheck(False, None, self._radius_m, reason="office_lookup_failed")

        if office is None:
            self._log.debug("geofence_rejected", reason="office_not_found", office_location_id=office_location_id)
            return GeoCheck(False, None, self._radius_m, reason="office_not_found")

        office_lat = as_finite_float(office.latitude)
        office_lng = as_finite_float(office.longitude)
        if office_lat is None or office_lng is None:
            self._log.debug("geofence_rejected", reason="invalid_office_coordinates", office_location_id=office_location_id)
            return GeoCheck(False, None, self._radius_m, office=office, reason="invalid_office_coordinates")

        distance = haversine_distance(office_lat, office_lng, lat, lng)
        within = distance <= self._radius_m
        self._log.debug(
            "geofence_checked",
            office_location_id=office_location_id,
            distance_m=round(distance, 2),
            radius_m=self._radius_m,
            within_range=within,
        )
        return GeoCheck(within, distance, self._radius_m, office=office, reason=None if within else "outside_radius")
