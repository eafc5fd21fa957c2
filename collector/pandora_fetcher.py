"""
Pandora Network Fetcher
Stations, ground-truth measurements and satellite comparison samples from a
Pandora-style JSON API, plus an in-memory source for offline use.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

import httpx

from collector.parsing import parse_comparison_sample, parse_measurement, parse_station
from config import (
    PANDORA_API_KEY,
    PANDORA_API_URL,
    PANDORA_HTTP_TIMEOUT_SECONDS,
    PANDORA_STATIONS,
)
from core.errors import DataUnavailableError, InputError
from core.models import ComparisonSample, Measurement, Station, StationStatus

logger = logging.getLogger("pandora_fetcher")

T = TypeVar("T")


def _unwrap_list(data: Any, key: str) -> List[Mapping[str, Any]]:
    """Accept either a bare JSON list or an object wrapping it under ``key``."""
    if isinstance(data, Mapping):
        data = data.get(key)
    if not isinstance(data, list):
        raise InputError(f"Expected a list of {key} in response")
    return data


class PandoraClient:
    """Thin synchronous client; transport failures and malformed payloads become DataUnavailableError."""

    def __init__(
        self,
        base_url: str = PANDORA_API_URL,
        api_key: str = PANDORA_API_KEY,
        timeout: float = PANDORA_HTTP_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None,
    ):
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout, headers=headers)
        self._owns_client = client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "PandoraClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Pandora API %s returned %s", path, e.response.status_code)
            raise DataUnavailableError(f"Pandora API error {e.response.status_code} for {path}") from e
        except httpx.HTTPError as e:
            logger.warning("Pandora API %s failed: %s", path, e)
            raise DataUnavailableError(f"Pandora API unreachable for {path}") from e
        except ValueError as e:
            raise DataUnavailableError(f"Pandora API returned invalid JSON for {path}") from e

    def _rows(
        self,
        path: str,
        key: str,
        parser: Callable[[Mapping[str, Any]], T],
        params: Optional[Dict[str, Any]] = None,
    ) -> List[T]:
        """GET a list endpoint and parse every row; a malformed payload counts as no data."""
        data = self._get(path, params)
        try:
            return [parser(row) for row in _unwrap_list(data, key)]
        except InputError as e:
            logger.warning("Pandora API %s returned a malformed payload: %s", path, e)
            raise DataUnavailableError(f"Malformed {key} payload from {path}: {e}") from e

    def fetch_stations(self) -> List[Station]:
        return self._rows("/stations", "stations", parse_station)

    def fetch_station_measurements(self, station_id: str, hours_back: int) -> List[Measurement]:
        """Recent measurements, oldest first."""
        measurements = self._rows(
            f"/stations/{station_id}/measurements",
            "measurements",
            parse_measurement,
            {"hours": hours_back},
        )
        measurements.sort(key=lambda m: m.timestamp)
        logger.debug("Fetched %d measurements for %s", len(measurements), station_id)
        return measurements

    def fetch_comparison_series(self, station_id: str, hours_back: int) -> List[ComparisonSample]:
        return self._rows(
            f"/stations/{station_id}/satellite",
            "samples",
            parse_comparison_sample,
            {"hours": hours_back},
        )


def configured_stations() -> List[Station]:
    """The network stations declared in config, in declaration order."""
    return [
        Station(
            id=cfg.station_id,
            name=cfg.name,
            latitude=cfg.latitude,
            longitude=cfg.longitude,
            elevation=cfg.elevation,
            status=StationStatus(cfg.status),
            instruments=cfg.instruments,
            country=cfg.country,
            region=cfg.region,
        )
        for cfg in PANDORA_STATIONS.values()
    ]


class StaticGroundTruthSource:
    """
    In-memory ground truth: used by tests, the CLI and when the network API
    is not configured.
    """

    def __init__(
        self,
        stations: Optional[Iterable[Station]] = None,
        measurements: Optional[Mapping[str, Sequence[Measurement]]] = None,
        comparison: Optional[Mapping[str, Sequence[ComparisonSample]]] = None,
    ):
        self.stations = list(stations) if stations is not None else configured_stations()
        self.measurements = {k: list(v) for k, v in (measurements or {}).items()}
        self.comparison = {k: list(v) for k, v in (comparison or {}).items()}

    def fetch_stations(self) -> List[Station]:
        return list(self.stations)

    def fetch_station_measurements(self, station_id: str, hours_back: int) -> List[Measurement]:
        rows = self.measurements.get(station_id)
        if not rows:
            raise DataUnavailableError(f"No measurements for {station_id}")
        ordered = sorted(rows, key=lambda m: m.timestamp)
        cutoff = ordered[-1].timestamp.timestamp() - hours_back * 3600
        return [m for m in ordered if m.timestamp.timestamp() >= cutoff]

    def fetch_comparison_series(self, station_id: str, hours_back: int) -> List[ComparisonSample]:
        return list(self.comparison.get(station_id, []))
