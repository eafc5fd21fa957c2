"""
Location label -> coordinates.

Known labels come from config; anything else must be a "lat,lon" pair.
"""

from typing import Tuple

from config import LOCATION_COORDINATES
from core.errors import DataUnavailableError


def resolve_location(label: str) -> Tuple[float, float]:
    """
    Raises:
        DataUnavailableError: label is neither known nor a coordinate pair
    """
    text = (label or "").strip()
    if text in LOCATION_COORDINATES:
        return LOCATION_COORDINATES[text]

    parts = [p.strip() for p in text.split(",")]
    if len(parts) == 2:
        try:
            lat, lon = float(parts[0]), float(parts[1])
        except ValueError:
            pass
        else:
            if -90 <= lat <= 90 and -180 <= lon <= 180:
                return lat, lon

    raise DataUnavailableError(f"Cannot resolve location '{label}'")
