"""
Measurement aggregation: quality filtering and hourly averaging.
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Tuple, Union

from core.models import Measurement, QualityGrade
from core.qc import QualityControl

# Numeric fields averaged per hourly bucket
_AVERAGED_FIELDS = (
    "no2",
    "o3",
    "hcho",
    "so2",
    "aerosol_optical_depth",
    "water_vapor",
    "temperature",
    "pressure",
    "solar_zenith_angle",
    "uncertainty_percent",
)


def filter_by_quality(
    measurements: Iterable[Measurement],
    min_grade: Union[QualityGrade, str] = QualityGrade.FAIR,
) -> List[Measurement]:
    """Keep measurements scoring at or above the grade's threshold, order preserved."""
    min_score = QualityGrade(min_grade).threshold
    return [m for m in measurements if QualityControl.score(m) >= min_score]


def _hour_key(measurement: Measurement) -> Tuple[int, int, int, int]:
    ts = measurement.timestamp
    return (ts.year, ts.month, ts.day, ts.hour)


def hourly_average(measurements: Iterable[Measurement]) -> List[Measurement]:
    """
    Collapse high-frequency measurements into one record per clock hour.

    Numeric fields are arithmetic means; the quality flag is the worst one
    seen in the hour; timestamp and station come from the first member.
    Output is sorted by timestamp. Empty input gives empty output.
    """
    groups: Dict[Tuple[int, int, int, int], List[Measurement]] = OrderedDict()
    for m in measurements:
        groups.setdefault(_hour_key(m), []).append(m)

    averages = []
    for members in groups.values():
        first = members[0]
        n = len(members)
        means = {
            name: sum(getattr(m, name) for m in members) / n
            for name in _AVERAGED_FIELDS
        }
        worst_flag = max((m.quality_flag for m in members), key=lambda f: f.severity)
        averages.append(
            Measurement(
                timestamp=first.timestamp,
                station_id=first.station_id,
                quality_flag=worst_flag,
                **means,
            )
        )

    return sorted(averages, key=lambda m: m.timestamp)
