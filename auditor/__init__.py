"""
Pandora Forecast Validation - Auditor Module
Validation summaries, anomaly detection and satellite comparison.
"""

from .anomaly import AnomalyRecord, detect_anomalies
from .pandora_summary import PandoraDataSummary, summarize_measurements
from .satellite_validation import SatelliteValidation, compare_with_satellite
from .validation_summary import build_recommendations, summarize_validation, unvalidated_metrics

__all__ = [
    "AnomalyRecord",
    "PandoraDataSummary",
    "SatelliteValidation",
    "build_recommendations",
    "compare_with_satellite",
    "detect_anomalies",
    "summarize_measurements",
    "summarize_validation",
    "unvalidated_metrics",
]
