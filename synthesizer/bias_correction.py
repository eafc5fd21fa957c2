"""
Pandora Forecast Validation - Bias Correction Module
Derives per-station fractional corrections from ground truth vs satellite.
"""

from datetime import timedelta
from typing import Sequence

from auditor.satellite_validation import compare_with_satellite
from config import MAX_CORRECTION_RATIO
from core.matching import DEFAULT_MATCH_WINDOW
from core.models import BiasCorrection, ComparisonSample, Measurement


def correction_ratio(relative_bias: float, max_ratio: float = MAX_CORRECTION_RATIO) -> float:
    """
    Turn a relative bias into a correction ratio.

    Positive bias means the comparison series over-estimates ground truth,
    so the forecast is pulled down. Capped to +/- max_ratio to avoid
    overcorrection from a handful of pairs.
    """
    return max(-max_ratio, min(max_ratio, -relative_bias))


def estimate_bias_correction(
    station_id: str,
    measurements: Sequence[Measurement],
    comparison: Sequence[ComparisonSample],
    window: timedelta = DEFAULT_MATCH_WINDOW,
    max_ratio: float = MAX_CORRECTION_RATIO,
) -> BiasCorrection:
    """
    Calculate bias corrections for a station.

    Ratio = -mean(comparison - ground truth) / mean(ground truth)

    Raises:
        DataUnavailableError: nothing to compare against
    """
    validation = compare_with_satellite(station_id, measurements, comparison, window)
    return BiasCorrection(
        station_id=station_id,
        no2_ratio=correction_ratio(validation.no2.relative_bias, max_ratio),
        o3_ratio=correction_ratio(validation.o3.relative_bias, max_ratio),
        matched_pairs=validation.valid_comparisons,
    )
