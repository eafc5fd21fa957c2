"""
Pandora Forecast Validation - Validation Summarizer
Coverage, bias, uncertainty reduction and overall score of one validation run.
"""

import math
from typing import List, Optional, Sequence

from config import UNVALIDATED_SCORE
from core.metrics import bias
from core.models import (
    ForecastPoint,
    Measurement,
    QualityGrade,
    Station,
    ValidatedForecastPoint,
    ValidationMetrics,
    ValidationSource,
)
from core.qc import QualityControl

# Cap on the uncertainty-reduction term of the score
MAX_SCORED_REDUCTION = 30.0


def coverage_percentage(validated: Sequence[ValidatedForecastPoint]) -> float:
    if not validated:
        return 0.0
    hybrid = sum(1 for p in validated if p.validation_source == ValidationSource.HYBRID)
    return 100.0 * hybrid / len(validated)


def mean_uncertainty(points: Sequence[ForecastPoint]) -> float:
    """mean(1 - confidence); 1.0 for an empty series."""
    if not points:
        return 1.0
    return sum(1.0 - p.confidence for p in points) / len(points)


def uncertainty_reduction(base: Sequence[ForecastPoint], corrected: Sequence[ForecastPoint]) -> float:
    """
    Percentage drop in mean uncertainty from base to corrected.

    Positive when the corrected series is less uncertain, negative when it
    is more uncertain, 0 when the base series carries no uncertainty.
    """
    base_u = mean_uncertainty(base)
    if base_u == 0:
        return 0.0
    return 100.0 * (base_u - mean_uncertainty(corrected)) / base_u


def quality_percentage(measurements: Sequence[Measurement]) -> float:
    """Share of measurements graded excellent or good, in percent."""
    if not measurements:
        return 0.0
    top = sum(
        1 for m in measurements
        if QualityControl.grade(m) in (QualityGrade.EXCELLENT, QualityGrade.GOOD)
    )
    return 100.0 * top / len(measurements)


def validation_score(coverage: float, quality_pct: float, reduction: float) -> float:
    score = 0.4 * coverage + 0.4 * quality_pct + 0.2 * min(reduction, MAX_SCORED_REDUCTION)
    return max(0.0, min(100.0, score))


def summarize_validation(
    base: Sequence[ForecastPoint],
    validated: Sequence[ValidatedForecastPoint],
    measurements: Sequence[Measurement],
    stations_used: int = 1,
) -> ValidationMetrics:
    coverage = coverage_percentage(validated)

    no2_bias = bias([p.pollutants.no2 for p in base], [p.pollutants.no2 for p in validated])
    o3_bias = bias([p.pollutants.o3 for p in base], [p.pollutants.o3 for p in validated])

    reduction = uncertainty_reduction(base, validated)
    quality_pct = quality_percentage(measurements)

    return ValidationMetrics(
        stations_used=stations_used,
        coverage=coverage,
        no2_bias=no2_bias,
        o3_bias=o3_bias,
        systematic_error=math.sqrt(no2_bias ** 2 + o3_bias ** 2),
        uncertainty_reduction=reduction,
        validation_score=validation_score(coverage, quality_pct, reduction),
    )


def unvalidated_metrics() -> ValidationMetrics:
    return ValidationMetrics(validation_score=UNVALIDATED_SCORE)


UNVALIDATED_RECOMMENDATIONS = (
    "No ground-based validation available for this location",
    "Forecast based solely on satellite and model data",
    "Consider results with additional caution",
)


def build_recommendations(metrics: ValidationMetrics, station: Optional[Station]) -> List[str]:
    """Advisory text for the caller."""
    if station is None:
        return list(UNVALIDATED_RECOMMENDATIONS)

    recommendations = []
    if metrics.validation_score >= 80:
        recommendations.append(f"High-quality forecast validation using {station.name} Pandora station")
    elif metrics.validation_score >= 60:
        recommendations.append(f"Moderate forecast validation available from {station.name} station")
    else:
        recommendations.append("Limited validation data available - use forecast with caution")

    if metrics.coverage < 50:
        recommendations.append("Consider additional ground-based measurements for better validation")

    if abs(metrics.systematic_error) > 0.1:
        recommendations.append(
            "Systematic bias detected - forecast has been corrected using Pandora reference data"
        )

    if metrics.uncertainty_reduction > 10:
        recommendations.append(
            f"Forecast uncertainty reduced by {metrics.uncertainty_reduction:.1f}% "
            "using ground-truth validation"
        )

    return recommendations
