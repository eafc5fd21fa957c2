import os
import random
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from collector.pandora_fetcher import configured_stations
from core.models import Station
from core.stations import haversine_km, nearest_station, nearest_station_with_distance


def _station(sid: str, lat: float, lon: float) -> Station:
    return Station(id=sid, name=sid, latitude=lat, longitude=lon)


def test_haversine_known_distance():
    # New York -> Los Angeles, ~3936 km
    d = haversine_km(40.7128, -74.0060, 34.0522, -118.2437)
    assert d == pytest.approx(3936, abs=5)
    assert haversine_km(10.0, 20.0, 10.0, 20.0) == 0.0


def test_empty_list_gives_none():
    assert nearest_station([], 40.0, -100.0) is None
    assert nearest_station_with_distance([], 40.0, -100.0) is None


def test_nearest_configured_station():
    stations = configured_stations()
    assert nearest_station(stations, 40.75, -73.99).id == "pandora_003"
    assert nearest_station(stations, 34.1, -118.3).id == "pandora_002"
    # Default central coordinate resolves to Denver
    assert nearest_station(stations, 40.0, -100.0).id == "pandora_005"


def test_ties_resolved_by_input_order():
    a = _station("A", 10.0, 1.0)
    b = _station("B", 10.0, -1.0)
    assert nearest_station([a, b], 10.0, 0.0).id == "A"
    assert nearest_station([b, a], 10.0, 0.0).id == "B"


def test_duplicate_coordinates_first_wins():
    stations = [_station(f"S{i}", 45.0, 7.0) for i in range(5)]
    assert nearest_station(stations, 44.0, 7.5).id == "S0"


def test_nearest_is_minimal_over_random_sets():
    rng = random.Random(20261019)
    for _ in range(200):
        n = rng.randint(1, 12)
        stations = [
            _station(f"S{i}", rng.uniform(-90, 90), rng.uniform(-180, 180))
            for i in range(n)
        ]
        lat, lon = rng.uniform(-90, 90), rng.uniform(-180, 180)
        best = nearest_station(stations, lat, lon)
        assert best is not None
        best_d = haversine_km(lat, lon, best.latitude, best.longitude)
        for s in stations:
            assert best_d <= haversine_km(lat, lon, s.latitude, s.longitude)
