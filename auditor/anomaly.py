"""
Pandora Forecast Validation - Anomaly Detector
Per-channel z-score outliers within a measurement batch.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from config import ANOMALY_Z_THRESHOLD
from core.errors import InputError
from core.metrics import mean, std_dev
from core.models import Measurement, POLLUTANT_CHANNELS


@dataclass(frozen=True)
class AnomalyRecord:
    measurement: Measurement
    channel: str
    value: float
    anomaly_score: float  # |z|
    direction: str  # "high" / "low" relative to the batch mean

    def to_dict(self) -> Dict[str, Any]:
        return {
            "measurement": self.measurement.to_dict(),
            "channel": self.channel,
            "value": self.value,
            "anomaly_score": self.anomaly_score,
            "type": self.direction,
        }


def detect_anomalies(
    measurements: Sequence[Measurement],
    channel: str,
    threshold: float = ANOMALY_Z_THRESHOLD,
) -> List[AnomalyRecord]:
    """Flag samples whose |z-score| exceeds threshold, largest first."""
    if channel not in POLLUTANT_CHANNELS:
        raise InputError(f"Unknown channel '{channel}', expected one of {', '.join(POLLUTANT_CHANNELS)}")
    if not measurements:
        return []

    values = [m.channel(channel) for m in measurements]
    mu = mean(values)
    sigma = std_dev(values)

    anomalies = []
    for measurement, value in zip(measurements, values):
        # Flat channel: every z-score is 0
        z = abs(value - mu) / sigma if sigma > 0 else 0.0
        if z > threshold:
            anomalies.append(
                AnomalyRecord(
                    measurement=measurement,
                    channel=channel,
                    value=value,
                    anomaly_score=z,
                    direction="high" if value > mu else "low",
                )
            )

    # sorted() is stable: equal scores keep batch order
    return sorted(anomalies, key=lambda a: a.anomaly_score, reverse=True)
