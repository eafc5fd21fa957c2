"""
Pandora Forecast Validation - Collector Module
Ground-truth network access and payload parsing.
"""

from .location import resolve_location
from .pandora_fetcher import PandoraClient, StaticGroundTruthSource, configured_stations
from .parsing import (
    parse_comparison_sample,
    parse_forecast_point,
    parse_measurement,
    parse_station,
    parse_timestamp,
)

__all__ = [
    "PandoraClient",
    "StaticGroundTruthSource",
    "configured_stations",
    "parse_comparison_sample",
    "parse_forecast_point",
    "parse_measurement",
    "parse_station",
    "parse_timestamp",
    "resolve_location",
]
