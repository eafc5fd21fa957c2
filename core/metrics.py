"""
Metrics Module - Ground Truth Comparison Metrics

Point metrics between a reference series (ground truth) and a comparison
series (satellite or model):
- bias: mean(comparison - reference)
- correlation: Pearson coefficient, 0 for a flat series
- RMSE / MAE

Plus the small descriptive helpers shared by the summarizers.
"""

import logging
import math
import statistics
from dataclasses import dataclass, asdict
from typing import Dict, List, Sequence

from core.errors import InputError

logger = logging.getLogger("metrics")


# =============================================================================
# Descriptive helpers
# =============================================================================

def mean(values: Sequence[float]) -> float:
    if not values:
        raise InputError("Cannot take the mean of an empty series")
    return statistics.fmean(values)


def median(values: Sequence[float]) -> float:
    if not values:
        raise InputError("Cannot take the median of an empty series")
    return float(statistics.median(values))


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation."""
    if not values:
        raise InputError("Cannot take the standard deviation of an empty series")
    return statistics.pstdev(values)


def _check_pair(reference: Sequence[float], comparison: Sequence[float], name: str) -> None:
    if len(reference) != len(comparison):
        raise InputError(
            f"Series must have the same length for {name} "
            f"(got {len(reference)} and {len(comparison)})"
        )
    if not reference:
        raise InputError(f"Empty series supplied for {name}")


# =============================================================================
# Point comparison metrics
# =============================================================================

def bias(reference: Sequence[float], comparison: Sequence[float]) -> float:
    """
    Mean bias of comparison against reference.

    Positive = comparison over-estimates, Negative = under-estimates
    """
    _check_pair(reference, comparison, "bias")
    return sum(c - r for r, c in zip(reference, comparison)) / len(reference)


def correlation(reference: Sequence[float], comparison: Sequence[float]) -> float:
    """Pearson correlation coefficient; 0 when either series has zero variance."""
    _check_pair(reference, comparison, "correlation")
    mean_r = mean(reference)
    mean_c = mean(comparison)

    numerator = sum((r - mean_r) * (c - mean_c) for r, c in zip(reference, comparison))
    denom_r = math.sqrt(sum((r - mean_r) ** 2 for r in reference))
    denom_c = math.sqrt(sum((c - mean_c) ** 2 for c in comparison))

    if denom_r == 0 or denom_c == 0:
        return 0.0
    # Rounding can push |r| a hair past 1
    return max(-1.0, min(1.0, numerator / (denom_r * denom_c)))


def rmse(reference: Sequence[float], comparison: Sequence[float]) -> float:
    """Root Mean Squared Error."""
    _check_pair(reference, comparison, "RMSE")
    mse = sum((c - r) ** 2 for r, c in zip(reference, comparison)) / len(reference)
    return math.sqrt(mse)


def mae(reference: Sequence[float], comparison: Sequence[float]) -> float:
    """Mean Absolute Error."""
    _check_pair(reference, comparison, "MAE")
    return sum(abs(c - r) for r, c in zip(reference, comparison)) / len(reference)


@dataclass
class ComparisonMetrics:
    """All point metrics for one pollutant channel."""
    channel: str
    n: int
    bias: float
    correlation: float
    rmse: float
    mae: float
    reference_mean: float

    @property
    def relative_bias(self) -> float:
        """Bias as a fraction of the reference mean (0 for a zero mean)."""
        if self.reference_mean == 0:
            return 0.0
        return self.bias / self.reference_mean

    def to_dict(self) -> Dict:
        d = asdict(self)
        d["relative_bias"] = self.relative_bias
        return d


def compare_series(
    channel: str,
    reference: Sequence[float],
    comparison: Sequence[float],
) -> ComparisonMetrics:
    """Compute bias, correlation, RMSE and MAE for a named channel."""
    _check_pair(reference, comparison, channel)
    metrics = ComparisonMetrics(
        channel=channel,
        n=len(reference),
        bias=bias(reference, comparison),
        correlation=correlation(reference, comparison),
        rmse=rmse(reference, comparison),
        mae=mae(reference, comparison),
        reference_mean=mean(reference),
    )
    logger.debug(
        "%s: n=%d bias=%.4g r=%.3f rmse=%.4g mae=%.4g",
        channel, metrics.n, metrics.bias, metrics.correlation, metrics.rmse, metrics.mae,
    )
    return metrics


def channel_values(samples: Sequence[object], channel: str) -> List[float]:
    return [float(getattr(s, channel)) for s in samples]
