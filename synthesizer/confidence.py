"""
Pandora Forecast Validation - Confidence Adjuster
Raises forecast confidence in proportion to ground-truth quality and recency.
"""

from typing import List, Sequence, Union

from config import MAX_CONFIDENCE
from core.models import (
    ConfidenceAdjustment,
    ForecastPoint,
    PointGrade,
    QualityGrade,
    ValidatedForecastPoint,
)

QUALITY_BOOST = {
    QualityGrade.EXCELLENT: 0.15,
    QualityGrade.GOOD: 0.10,
    QualityGrade.FAIR: 0.05,
    QualityGrade.POOR: 0.0,
}

# Adjustments smaller than this are reported as unchanged
SIGNIFICANT_ADJUSTMENT = 0.05
# Adjustment that counts as full ground-truth influence
FULL_INFLUENCE_ADJUSTMENT = 0.15


def quality_boost(grade: Union[QualityGrade, str]) -> float:
    return QUALITY_BOOST[QualityGrade(grade)]


def adjust_confidence(
    base_confidence: float,
    grade: Union[QualityGrade, str],
    decay: float,
    ceiling: float = MAX_CONFIDENCE,
) -> float:
    """base + boost(grade) * decay, kept within [0, ceiling]."""
    boosted = base_confidence + quality_boost(grade) * decay
    return max(0.0, min(ceiling, boosted))


def grade_point(adjusted_confidence: float, decay: float) -> PointGrade:
    """
    Both conditions must hold in each branch: a confident point backed by
    stale ground truth is not "high".
    """
    if adjusted_confidence >= 0.8 and decay > 0.7:
        return PointGrade.HIGH
    if adjusted_confidence >= 0.6 and decay > 0.4:
        return PointGrade.MEDIUM
    return PointGrade.LOW


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def build_confidence_adjustments(
    base: Sequence[ForecastPoint],
    validated: Sequence[ValidatedForecastPoint],
) -> List[ConfidenceAdjustment]:
    adjustments = []
    for original, corrected in zip(base, validated):
        delta = corrected.confidence - original.confidence
        reason = "No significant changes"
        influence = 0.0

        if abs(delta) > SIGNIFICANT_ADJUSTMENT:
            if delta > 0:
                reason = "Confidence increased due to Pandora validation"
            else:
                reason = "Confidence decreased due to data uncertainty"
            influence = _clamp(delta / FULL_INFLUENCE_ADJUSTMENT, -1.0, 1.0)

        adjustments.append(
            ConfidenceAdjustment(
                timestamp=original.timestamp,
                original_confidence=original.confidence,
                adjusted_confidence=corrected.confidence,
                reason=reason,
                influence=influence,
            )
        )
    return adjustments


def unvalidated_adjustments(base: Sequence[ForecastPoint]) -> List[ConfidenceAdjustment]:
    return [
        ConfidenceAdjustment(
            timestamp=p.timestamp,
            original_confidence=p.confidence,
            adjusted_confidence=p.confidence,
            reason="No Pandora validation available",
            influence=0.0,
        )
        for p in base
    ]
