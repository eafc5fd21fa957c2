from typing import List
from dataclasses import dataclass

from core.models import Measurement, QualityFlag, QualityGrade


@dataclass(frozen=True)
class QualityAssessment:
    score: int
    grade: QualityGrade
    factors: List[str]


def grade_for_score(score: float) -> QualityGrade:
    """Monotonic step function: highest grade whose threshold the score reaches."""
    for grade in (QualityGrade.EXCELLENT, QualityGrade.GOOD, QualityGrade.FAIR):
        if score >= grade.threshold:
            return grade
    return QualityGrade.POOR


class QualityControl:
    """
    Quality Control (QC) rules for Pandora measurements.
    Penalties are subtracted from a perfect score of 100.
    """

    # Penalties
    QUESTIONABLE_PENALTY = 20
    BAD_PENALTY = 50
    UNCERTAINTY_PENALTY = 15
    ZENITH_PENALTY = 10
    AEROSOL_PENALTY = 10

    # Thresholds
    MAX_UNCERTAINTY_PERCENT = 15.0
    MAX_SOLAR_ZENITH_DEG = 75.0
    MAX_AEROSOL_OPTICAL_DEPTH = 0.4

    @staticmethod
    def assess(measurement: Measurement) -> QualityAssessment:
        """Score a measurement and list what pulled the score down."""
        factors = []
        score = 100

        # Flag penalties never stack
        if measurement.quality_flag == QualityFlag.QUESTIONABLE:
            factors.append("Questionable quality flag")
            score -= QualityControl.QUESTIONABLE_PENALTY
        elif measurement.quality_flag == QualityFlag.BAD:
            factors.append("Bad quality flag")
            score -= QualityControl.BAD_PENALTY

        if measurement.uncertainty_percent > QualityControl.MAX_UNCERTAINTY_PERCENT:
            factors.append("High measurement uncertainty")
            score -= QualityControl.UNCERTAINTY_PENALTY

        if measurement.solar_zenith_angle > QualityControl.MAX_SOLAR_ZENITH_DEG:
            factors.append("High solar zenith angle")
            score -= QualityControl.ZENITH_PENALTY

        if measurement.aerosol_optical_depth > QualityControl.MAX_AEROSOL_OPTICAL_DEPTH:
            factors.append("High aerosol loading")
            score -= QualityControl.AEROSOL_PENALTY

        score = max(0, min(100, score))
        return QualityAssessment(score, grade_for_score(score), factors)

    @staticmethod
    def score(measurement: Measurement) -> int:
        return QualityControl.assess(measurement).score

    @staticmethod
    def grade(measurement: Measurement) -> QualityGrade:
        return QualityControl.assess(measurement).grade
