"""
Pandora Forecast Validation - Deviation Engine
Decay-weighted bias correction of the base forecast.
"""

from .temporal_decay import (
    DecayedPoint,
    apply_decay_correction,
    correct_point,
    decay_weight,
    validation_source_for,
)

__all__ = [
    "DecayedPoint",
    "apply_decay_correction",
    "correct_point",
    "decay_weight",
    "validation_source_for",
]
