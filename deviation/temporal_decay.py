"""
Temporal Decay - Ground-truth influence over forecast horizon

Ground truth is most relevant for the forecast step right after the last
observation and loses relevance at a fixed rate afterwards:

    decay(i) = exp(-i / 12)        (i = 0 is nearest to the last observation)

The same decay scales the bias correction applied to each pollutant:

    corrected = value * (1 + ratio * decay),  clamped at 0

A point keeps "hybrid" provenance while decay stays above 0.3 (about the
first 14 steps); past that it is effectively model-only again.
"""
import math
from dataclasses import dataclass
from typing import List, Sequence

from config import DECAY_HORIZON_STEPS, HYBRID_DECAY_THRESHOLD
from core.models import BiasCorrection, ForecastPoint, Pollutants, ValidationSource

CORRECTED_POLLUTANTS = ("no2", "o3")


def decay_weight(index: int, horizon: float = DECAY_HORIZON_STEPS) -> float:
    """
    Calculate ground-truth weight for a forecast step.

    Args:
        index: Steps since the last ground-truth observation (>= 0)
        horizon: e-folding horizon in steps

    Returns:
        Weight factor: 1.0 at index 0, exp(-1) at index == horizon
    """
    return math.exp(-index / horizon)


def validation_source_for(decay: float, threshold: float = HYBRID_DECAY_THRESHOLD) -> ValidationSource:
    return ValidationSource.HYBRID if decay > threshold else ValidationSource.MODEL


def correct_value(value: float, ratio: float, decay: float) -> float:
    return max(0.0, value * (1 + ratio * decay))


@dataclass(frozen=True)
class DecayedPoint:
    """Corrected pollutants for one step, with the decay that produced them."""
    index: int
    decay: float
    pollutants: Pollutants
    validation_source: ValidationSource


def correct_point(
    point: ForecastPoint,
    index: int,
    correction: BiasCorrection,
    horizon: float = DECAY_HORIZON_STEPS,
    hybrid_threshold: float = HYBRID_DECAY_THRESHOLD,
) -> DecayedPoint:
    decay = decay_weight(index, horizon)
    p = point.pollutants
    pollutants = Pollutants(
        no2=correct_value(p.no2, correction.no2_ratio, decay),
        o3=correct_value(p.o3, correction.o3_ratio, decay),
        pm25=p.pm25,
        hcho=p.hcho,
    )
    return DecayedPoint(index, decay, pollutants, validation_source_for(decay, hybrid_threshold))


def apply_decay_correction(
    forecast: Sequence[ForecastPoint],
    correction: BiasCorrection,
    horizon: float = DECAY_HORIZON_STEPS,
    hybrid_threshold: float = HYBRID_DECAY_THRESHOLD,
) -> List[DecayedPoint]:
    """Correct every forecast step; the input points are left untouched."""
    return [
        correct_point(point, i, correction, horizon, hybrid_threshold)
        for i, point in enumerate(forecast)
    ]
