"""
Pandora Forecast Validation - Synthesizer Module
Bias estimation and confidence adjustment.
"""

from .bias_correction import estimate_bias_correction, correction_ratio
from .confidence import (
    QUALITY_BOOST,
    adjust_confidence,
    build_confidence_adjustments,
    grade_point,
    quality_boost,
    unvalidated_adjustments,
)

__all__ = [
    "QUALITY_BOOST",
    "adjust_confidence",
    "build_confidence_adjustments",
    "correction_ratio",
    "estimate_bias_correction",
    "grade_point",
    "quality_boost",
    "unvalidated_adjustments",
]
