"""
Payload parsing for Pandora stations, measurements, comparison samples and
base forecasts. Malformed payloads raise InputError.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from core.errors import InputError
from core.models import (
    ComparisonSample,
    ForecastPoint,
    Measurement,
    Pollutants,
    QualityFlag,
    Station,
    StationStatus,
)


def parse_timestamp(value: Any) -> datetime:
    """ISO string or datetime -> tz-aware UTC datetime (naive values are taken as UTC)."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise InputError(f"Invalid timestamp: {value!r}") from e
    else:
        raise InputError(f"Invalid timestamp: {value!r}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _number(
    payload: Mapping[str, Any],
    *keys: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> float:
    for key in keys:
        if key in payload and payload[key] is not None:
            raw = payload[key]
            break
    else:
        raise InputError(f"Missing field: {keys[0]}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise InputError(f"Field {keys[0]} is not numeric: {raw!r}") from e
    if math.isnan(value) or math.isinf(value):
        raise InputError(f"Field {keys[0]} is not finite")
    if minimum is not None and value < minimum:
        raise InputError(f"Field {keys[0]} below {minimum}: {value}")
    if maximum is not None and value > maximum:
        raise InputError(f"Field {keys[0]} above {maximum}: {value}")
    return value


def parse_measurement(payload: Mapping[str, Any]) -> Measurement:
    """Accepts both the network's ``no2_column`` names and the short ``no2`` names."""
    try:
        flag = QualityFlag.from_code(payload.get("quality_flag", 0))
    except ValueError as e:
        raise InputError(str(e)) from e

    station_id = payload.get("station_id")
    if not station_id:
        raise InputError("Missing field: station_id")

    return Measurement(
        timestamp=parse_timestamp(payload.get("timestamp")),
        station_id=str(station_id),
        no2=_number(payload, "no2_column", "no2", minimum=0),
        o3=_number(payload, "o3_column", "o3", minimum=0),
        hcho=_number(payload, "hcho_column", "hcho", minimum=0),
        so2=_number(payload, "so2_column", "so2", minimum=0),
        aerosol_optical_depth=_number(payload, "aerosol_optical_depth", minimum=0),
        water_vapor=_number(payload, "water_vapor", minimum=0),
        temperature=_number(payload, "temperature"),
        pressure=_number(payload, "pressure"),
        solar_zenith_angle=_number(payload, "solar_zenith_angle", minimum=0, maximum=90),
        quality_flag=flag,
        uncertainty_percent=_number(payload, "uncertainty_percent", minimum=0),
    )


def parse_station(payload: Mapping[str, Any]) -> Station:
    try:
        status = StationStatus(str(payload.get("status", "active")).lower())
    except ValueError as e:
        raise InputError(f"Unknown station status: {payload.get('status')!r}") from e
    station_id = payload.get("id") or payload.get("station_id")
    if not station_id:
        raise InputError("Missing field: id")
    return Station(
        id=str(station_id),
        name=str(payload.get("name", station_id)),
        latitude=_number(payload, "latitude", minimum=-90, maximum=90),
        longitude=_number(payload, "longitude", minimum=-180, maximum=180),
        elevation=_number(payload, "elevation") if payload.get("elevation") is not None else 0.0,
        status=status,
        instruments=frozenset(payload.get("instruments") or ()),
        country=str(payload.get("country", "")),
        region=str(payload.get("region", "")),
    )


def parse_comparison_sample(payload: Mapping[str, Any]) -> ComparisonSample:
    return ComparisonSample(
        timestamp=parse_timestamp(payload.get("timestamp")),
        no2=_number(payload, "no2", "no2_column", minimum=0),
        o3=_number(payload, "o3", "o3_column", minimum=0),
    )


def parse_forecast_point(payload: Mapping[str, Any]) -> ForecastPoint:
    aqi = _number(payload, "aqi", minimum=0)
    if aqi != int(aqi):
        raise InputError(f"AQI must be integer-valued: {aqi}")
    pollutants: Dict[str, Any] = payload.get("pollutants") or {}
    if not isinstance(pollutants, Mapping):
        raise InputError("Field pollutants must be an object")
    return ForecastPoint(
        timestamp=parse_timestamp(payload.get("timestamp")),
        aqi=int(aqi),
        pollutants=Pollutants(
            **{
                name: _number(pollutants, name, minimum=0) if name in pollutants else 0.0
                for name in ("no2", "o3", "pm25", "hcho")
            }
        ),
        confidence=_number(payload, "confidence", minimum=0, maximum=1),
    )
