from __future__ import annotations

import math
from typing import Any, Optional

from ..core.exceptions import ValidationError


def optional_text(value: Optional[str], field_name: str, *, max_length: int) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return text


def as_finite_float(value: Any) -> Optional[float]:
    """Coerce ``value`` to a finite float, or None when that is impossible."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def require_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
    """Validate a device location submitted with a punch."""
    if latitude is None or longitude is None or latitude == "" or longitude == "":
        raise ValidationError("Latitude and longitude are required")

    lat = as_finite_float(latitude)
    lng = as_finite_float(longitude)
    if lat is None or lng is None:
        raise ValidationError("Latitude and longitude must be numbers")
    if not -90 <= lat <= 90:
        raise ValidationError("Latitude must be between -90 and 90")
    if not -180 <= lng <= 180:
        raise ValidationError("Longitude must be between -180 and 180")
    return lat, lng
