"""
Short-term trend estimation by ordinary least squares against sample index.
"""

from dataclasses import dataclass
from typing import Sequence

from core.errors import InputError

# Dead-zone around zero slope, in value units per sample
TREND_SLOPE_DEADZONE = 0.01


@dataclass(frozen=True)
class LinearTrend:
    slope: float
    intercept: float
    r2: float

    @property
    def label(self) -> str:
        return classify_trend(self.slope)


def linear_trend(values: Sequence[float]) -> LinearTrend:
    """
    Fit value = slope * index + intercept over 0-based positions.

    R² is 0 (not NaN) when the series is flat.
    """
    n = len(values)
    if n == 0:
        raise InputError("Cannot fit a trend to an empty series")

    mean_x = (n - 1) / 2
    mean_y = sum(values) / n

    numerator = sum((i - mean_x) * (y - mean_y) for i, y in enumerate(values))
    denominator = sum((i - mean_x) ** 2 for i in range(n))

    slope = numerator / denominator if denominator else 0.0
    intercept = mean_y - slope * mean_x

    total_ss = sum((y - mean_y) ** 2 for y in values)
    if total_ss == 0:
        return LinearTrend(slope, intercept, 0.0)

    residual_ss = sum((y - (slope * i + intercept)) ** 2 for i, y in enumerate(values))
    return LinearTrend(slope, intercept, 1 - residual_ss / total_ss)


def classify_trend(slope: float) -> str:
    if slope > TREND_SLOPE_DEADZONE:
        return "increasing"
    if slope < -TREND_SLOPE_DEADZONE:
        return "decreasing"
    return "stable"
