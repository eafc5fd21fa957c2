"""
Pandora Forecast Validation - Satellite Comparison
Ground truth vs satellite (or model) column densities for one station.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Any, Sequence

from core.errors import DataUnavailableError
from core.matching import DEFAULT_MATCH_WINDOW, match_timestamps
from core.metrics import ComparisonMetrics, compare_series
from core.models import ComparisonSample, Measurement

logger = logging.getLogger("satellite_validation")


@dataclass
class SatelliteValidation:
    station_id: str
    period_start: datetime
    period_end: datetime
    no2: ComparisonMetrics
    o3: ComparisonMetrics
    total_possible: int
    valid_comparisons: int

    @property
    def availability_percentage(self) -> float:
        if not self.total_possible:
            return 0.0
        return self.valid_comparisons / self.total_possible * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "validation_period": f"{self.period_start.isoformat()} to {self.period_end.isoformat()}",
            "satellite_bias": {
                "no2_bias": self.no2.bias,
                "o3_bias": self.o3.bias,
            },
            "correlation_metrics": {
                "no2_correlation": self.no2.correlation,
                "o3_correlation": self.o3.correlation,
                "rmse": self.no2.rmse,
                "mae": self.no2.mae,
            },
            "data_availability": {
                "total_possible": self.total_possible,
                "valid_comparisons": self.valid_comparisons,
                "availability_percentage": round(self.availability_percentage, 2),
            },
        }


def compare_with_satellite(
    station_id: str,
    measurements: Sequence[Measurement],
    satellite: Sequence[ComparisonSample],
    window: timedelta = DEFAULT_MATCH_WINDOW,
) -> SatelliteValidation:
    """
    Match ground truth against satellite samples and compute NO2/O3 metrics.

    Raises:
        DataUnavailableError: no sample pair fell within the window
    """
    pairs = match_timestamps(measurements, satellite, window)
    if not pairs:
        raise DataUnavailableError(
            f"No matching timestamps between {station_id} ground truth and comparison data"
        )

    reference_no2 = [p.reference.no2 for p in pairs]
    reference_o3 = [p.reference.o3 for p in pairs]

    result = SatelliteValidation(
        station_id=station_id,
        period_start=pairs[0].reference.timestamp,
        period_end=pairs[-1].reference.timestamp,
        no2=compare_series("no2", reference_no2, [p.comparison.no2 for p in pairs]),
        o3=compare_series("o3", reference_o3, [p.comparison.o3 for p in pairs]),
        total_possible=max(len(measurements), len(satellite)),
        valid_comparisons=len(pairs),
    )
    logger.info(
        "%s: %d/%d comparisons, no2 bias %.3g, r=%.3f",
        station_id, result.valid_comparisons, result.total_possible,
        result.no2.bias, result.no2.correlation,
    )
    return result
