import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import (
    ForecastPoint,
    PointGrade,
    Pollutants,
    QualityGrade,
    ValidatedForecastPoint,
    ValidationSource,
)
from synthesizer.confidence import (
    QUALITY_BOOST,
    adjust_confidence,
    build_confidence_adjustments,
    grade_point,
    quality_boost,
    unvalidated_adjustments,
)

T0 = datetime(2026, 3, 1, 0, 0, tzinfo=timezone.utc)


def _point(i: int, confidence: float) -> ForecastPoint:
    return ForecastPoint(
        timestamp=T0 + timedelta(hours=i),
        aqi=42,
        pollutants=Pollutants(no2=10.0, o3=30.0),
        confidence=confidence,
    )


def test_boost_table():
    assert QUALITY_BOOST[QualityGrade.EXCELLENT] == 0.15
    assert quality_boost("good") == 0.10
    assert quality_boost(QualityGrade.FAIR) == 0.05
    assert quality_boost(QualityGrade.POOR) == 0.0


def test_boost_scales_with_decay():
    assert adjust_confidence(0.5, QualityGrade.EXCELLENT, 1.0) == pytest.approx(0.65)
    assert adjust_confidence(0.5, QualityGrade.GOOD, 0.5) == pytest.approx(0.55)
    assert adjust_confidence(0.5, QualityGrade.EXCELLENT, 0.0) == 0.5


def test_confidence_never_exceeds_ceiling():
    assert adjust_confidence(1.0, QualityGrade.EXCELLENT, 1.0) == 0.95
    assert adjust_confidence(0.9, QualityGrade.EXCELLENT, 1.0) == 0.95
    for base in (0.0, 0.3, 0.8, 0.94, 0.95, 1.0):
        for grade in QualityGrade:
            assert adjust_confidence(base, grade, 1.0) <= 0.95


def test_custom_ceiling():
    assert adjust_confidence(0.9, QualityGrade.EXCELLENT, 1.0, ceiling=0.99) == pytest.approx(0.99)


class TestGradePoint:
    def test_high_needs_both_confidence_and_fresh_ground_truth(self):
        assert grade_point(0.85, 0.9) == PointGrade.HIGH
        # Confident but stale ground truth
        assert grade_point(0.95, 0.5) == PointGrade.MEDIUM
        assert grade_point(0.95, 0.2) == PointGrade.LOW

    def test_medium(self):
        assert grade_point(0.65, 1.0) == PointGrade.MEDIUM
        assert grade_point(0.6, 0.41) == PointGrade.MEDIUM
        assert grade_point(0.59, 1.0) == PointGrade.LOW

    def test_decay_bounds_are_strict(self):
        assert grade_point(0.9, 0.7) == PointGrade.MEDIUM
        assert grade_point(0.7, 0.4) == PointGrade.LOW

    def test_zero_decay_is_always_low(self):
        for conf in (0.0, 0.5, 0.8, 1.0):
            assert grade_point(conf, 0.0) == PointGrade.LOW


class TestAdjustments:
    def _validated(self, point: ForecastPoint, confidence: float) -> ValidatedForecastPoint:
        return ValidatedForecastPoint.from_point(
            point, PointGrade.MEDIUM, ValidationSource.HYBRID, confidence=confidence
        )

    def test_reasons_and_influence(self):
        base = [_point(0, 0.5), _point(1, 0.5), _point(2, 0.8)]
        validated = [
            self._validated(base[0], 0.65),
            self._validated(base[1], 0.53),
            self._validated(base[2], 0.7),
        ]
        adjustments = build_confidence_adjustments(base, validated)

        assert adjustments[0].reason == "Confidence increased due to Pandora validation"
        assert adjustments[0].influence == pytest.approx(1.0)
        assert adjustments[1].reason == "No significant changes"
        assert adjustments[1].influence == 0.0
        assert adjustments[2].reason == "Confidence decreased due to data uncertainty"
        assert adjustments[2].influence == pytest.approx(-0.1 / 0.15)

        assert adjustments[0].timestamp == base[0].timestamp
        assert adjustments[0].original_confidence == 0.5
        assert adjustments[0].adjusted_confidence == 0.65

    def test_unvalidated_adjustments_keep_confidence(self):
        base = [_point(0, 0.4), _point(1, 0.7)]
        adjustments = unvalidated_adjustments(base)
        assert [a.adjusted_confidence for a in adjustments] == [0.4, 0.7]
        assert all(a.reason == "No Pandora validation available" for a in adjustments)
