import itertools
import os
import sys
from datetime import datetime, timezone

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import Measurement, QualityFlag, QualityGrade
from core.qc import QualityControl, grade_for_score


def _measurement(
    flag: QualityFlag = QualityFlag.GOOD,
    uncertainty: float = 5.0,
    sza: float = 30.0,
    aod: float = 0.1,
) -> Measurement:
    return Measurement(
        timestamp=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        station_id="pandora_001",
        no2=2.5e15,
        o3=3.2e18,
        hcho=8.5e14,
        so2=1.2e15,
        aerosol_optical_depth=aod,
        water_vapor=1.5e22,
        temperature=22.0,
        pressure=1015.0,
        solar_zenith_angle=sza,
        quality_flag=flag,
        uncertainty_percent=uncertainty,
    )


def test_clean_measurement_is_excellent():
    result = QualityControl.assess(_measurement())
    assert result.score == 100
    assert result.grade == QualityGrade.EXCELLENT
    assert result.factors == []


def test_flag_penalties_do_not_stack():
    assert QualityControl.score(_measurement(flag=QualityFlag.QUESTIONABLE)) == 80
    assert QualityControl.score(_measurement(flag=QualityFlag.BAD)) == 50


def test_each_penalty_applies_once():
    assert QualityControl.score(_measurement(uncertainty=15.1)) == 85
    assert QualityControl.score(_measurement(sza=75.5)) == 90
    assert QualityControl.score(_measurement(aod=0.41)) == 90


def test_thresholds_are_strict():
    # Exactly on the limit is not penalized
    m = _measurement(uncertainty=15.0, sza=75.0, aod=0.4)
    assert QualityControl.score(m) == 100


def test_worst_case_score_and_factors():
    m = _measurement(flag=QualityFlag.BAD, uncertainty=40, sza=85, aod=0.9)
    result = QualityControl.assess(m)
    assert result.score == 15
    assert result.grade == QualityGrade.POOR
    assert result.factors == [
        "Bad quality flag",
        "High measurement uncertainty",
        "High solar zenith angle",
        "High aerosol loading",
    ]


def test_score_always_in_range_for_all_penalty_combinations():
    flags = list(QualityFlag)
    for flag, unc, sza, aod in itertools.product(flags, (0, 50), (0, 90), (0, 5)):
        score = QualityControl.score(_measurement(flag, unc, sza, aod))
        assert 0 <= score <= 100


def test_grade_is_monotonic_step_function():
    order = [QualityGrade.POOR, QualityGrade.FAIR, QualityGrade.GOOD, QualityGrade.EXCELLENT]
    previous = 0
    for score in range(0, 101):
        rank = order.index(grade_for_score(score))
        assert rank >= previous
        previous = rank

    assert grade_for_score(89) == QualityGrade.GOOD
    assert grade_for_score(90) == QualityGrade.EXCELLENT
    assert grade_for_score(75) == QualityGrade.GOOD
    assert grade_for_score(74) == QualityGrade.FAIR
    assert grade_for_score(60) == QualityGrade.FAIR
    assert grade_for_score(59) == QualityGrade.POOR


def test_grade_thresholds_live_on_enum():
    assert [g.threshold for g in QualityGrade] == [90, 75, 60, 0]


def test_numeric_flag_codes():
    assert QualityFlag.from_code(0) == QualityFlag.GOOD
    assert QualityFlag.from_code(1) == QualityFlag.QUESTIONABLE
    assert QualityFlag.from_code(2) == QualityFlag.BAD
    assert QualityFlag.from_code("Bad") == QualityFlag.BAD
