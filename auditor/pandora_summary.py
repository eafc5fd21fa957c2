"""
Pandora Forecast Validation - Measurement Summary
Per-pollutant statistics, quality histogram and atmospheric averages.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Sequence

from core.errors import InputError
from core.metrics import mean, median, std_dev
from core.models import Measurement, POLLUTANT_CHANNELS, QualityGrade
from core.qc import QualityControl
from core.trend import linear_trend


@dataclass
class PollutantStats:
    mean: float
    median: float
    min: float
    max: float
    std_dev: float
    trend: str
    trend_magnitude: float


@dataclass
class DataQualityHistogram:
    excellent_count: int = 0
    good_count: int = 0
    fair_count: int = 0
    poor_count: int = 0

    @property
    def total_measurements(self) -> int:
        return self.excellent_count + self.good_count + self.fair_count + self.poor_count

    @property
    def quality_percentage(self) -> float:
        if not self.total_measurements:
            return 0.0
        return (self.excellent_count + self.good_count) / self.total_measurements * 100

    def add(self, grade: QualityGrade) -> None:
        field_name = f"{grade.value}_count"
        setattr(self, field_name, getattr(self, field_name) + 1)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["total_measurements"] = self.total_measurements
        d["quality_percentage"] = self.quality_percentage
        return d


@dataclass
class AtmosphericConditions:
    avg_temperature: float
    avg_pressure: float
    avg_solar_zenith_angle: float
    avg_uncertainty: float


@dataclass
class PandoraDataSummary:
    station_id: str
    period_start: datetime
    period_end: datetime
    pollutant_stats: Dict[str, PollutantStats]
    data_quality: DataQualityHistogram
    atmospheric_conditions: AtmosphericConditions

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "period": {
                "start": self.period_start.isoformat(),
                "end": self.period_end.isoformat(),
            },
            "pollutant_stats": {k: asdict(v) for k, v in self.pollutant_stats.items()},
            "data_quality": self.data_quality.to_dict(),
            "atmospheric_conditions": asdict(self.atmospheric_conditions),
        }


def pollutant_stats(values: Sequence[float]) -> PollutantStats:
    if not values:
        raise InputError("No values provided for pollutant statistics")
    trend = linear_trend(values)
    return PollutantStats(
        mean=mean(values),
        median=median(values),
        min=min(values),
        max=max(values),
        std_dev=std_dev(values),
        trend=trend.label,
        trend_magnitude=abs(trend.slope),
    )


def summarize_measurements(measurements: Sequence[Measurement]) -> PandoraDataSummary:
    """
    Summarize a measurement batch.

    Trends are fitted in the order the batch was given (oldest first from
    the network).

    Raises:
        InputError: empty batch
    """
    if not measurements:
        raise InputError("No measurements provided for summary calculation")

    timestamps = sorted(m.timestamp for m in measurements)

    quality = DataQualityHistogram()
    for m in measurements:
        quality.add(QualityControl.grade(m))

    return PandoraDataSummary(
        station_id=measurements[0].station_id,
        period_start=timestamps[0],
        period_end=timestamps[-1],
        pollutant_stats={
            channel: pollutant_stats([m.channel(channel) for m in measurements])
            for channel in POLLUTANT_CHANNELS
        },
        data_quality=quality,
        atmospheric_conditions=AtmosphericConditions(
            avg_temperature=mean([m.temperature for m in measurements]),
            avg_pressure=mean([m.pressure for m in measurements]),
            avg_solar_zenith_angle=mean([m.solar_zenith_angle for m in measurements]),
            avg_uncertainty=mean([m.uncertainty_percent for m in measurements]),
        ),
    )
