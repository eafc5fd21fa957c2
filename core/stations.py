"""
Station lookup over the ground-truth network.
"""

import math
from typing import Iterable, Optional, Tuple

from core.models import Station

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in km."""
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dlat = p2 - p1
    dlon = math.radians(lon2 - lon1)
    a = math.sin(dlat / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def nearest_station_with_distance(
    stations: Iterable[Station],
    lat: float,
    lon: float,
) -> Optional[Tuple[Station, float]]:
    nearest = None
    min_distance = math.inf
    for station in stations:
        distance = haversine_km(lat, lon, station.latitude, station.longitude)
        # Strict comparison: the first of several equidistant stations wins
        if distance < min_distance:
            min_distance = distance
            nearest = station
    if nearest is None:
        return None
    return nearest, min_distance


def nearest_station(stations: Iterable[Station], lat: float, lon: float) -> Optional[Station]:
    """Closest station to (lat, lon), or None when the list is empty."""
    found = nearest_station_with_distance(stations, lat, lon)
    return found[0] if found else None
