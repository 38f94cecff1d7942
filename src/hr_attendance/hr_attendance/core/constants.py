"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

EARTH_RADIUS_METERS = 6_371_000
DEFAULT_GEOFENCE_RADIUS_METERS = 500.0

STANDARD_SHIFT_HOURS = 8.0
DEFAULT_SHIFT_START = time(9, 0)
DEFAULT_SHIFT_END = time(18, 0)
LATE_THRESHOLD_MINUTES = 30
EARLY_DEPARTURE_THRESHOLD_MINUTES = 30
HALF_DAY_THRESHOLD_HOURS = 4.0

HALF_DAY_WEIGHT = 0.5

DEFAULT_HISTORY_DAYS = 30
DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 30
MAX_PAGE_LIMIT = 200

EARLY_DEPARTURE_REASON_MAX_LENGTH = 500
