"""
Forecast Validation Engine

Reconciles an opaque base forecast with Pandora ground truth:

    LOCATE_STATION -> FETCH_MEASUREMENTS -> FILTER_QUALITY -> ESTIMATE_BIAS
    -> CORRECT -> ADJUST_CONFIDENCE -> SUMMARIZE -> RECOMMEND

Missing ground truth (no station, failed fetch, nothing passing QC, nothing
to compare against) is expected: the engine logs it and returns the
unvalidated forecast. Malformed ground-truth payloads degrade the same way;
only a malformed base forecast from the caller raises InputError.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional, Protocol, Sequence, Tuple

import config
from auditor.anomaly import AnomalyRecord, detect_anomalies
from auditor.pandora_summary import PandoraDataSummary, summarize_measurements
from auditor.validation_summary import (
    build_recommendations,
    summarize_validation,
    unvalidated_metrics,
)
from collector.location import resolve_location
from core.aggregation import filter_by_quality
from core.bias_cache import BiasCorrectionCache
from core.errors import DataUnavailableError, InputError
from core.models import (
    BiasCorrection,
    ComparisonSample,
    EnhancedForecastResult,
    ForecastPoint,
    Measurement,
    QualityGrade,
    Station,
    ValidatedForecastPoint,
    ValidationSource,
)
from core.qc import QualityControl
from core.stations import nearest_station_with_distance
from deviation.temporal_decay import apply_decay_correction
from synthesizer.bias_correction import estimate_bias_correction
from synthesizer.confidence import (
    adjust_confidence,
    build_confidence_adjustments,
    grade_point,
    unvalidated_adjustments,
)

logger = logging.getLogger("validation_engine")


class GroundTruthSource(Protocol):
    """What the engine needs from the outside world."""

    def fetch_stations(self) -> List[Station]: ...

    def fetch_station_measurements(self, station_id: str, hours_back: int) -> List[Measurement]: ...

    def fetch_comparison_series(self, station_id: str, hours_back: int) -> List[ComparisonSample]: ...


@dataclass
class ValidationConfig:
    """Configuration for the Forecast Validation Engine."""
    # Ground truth window
    lookback_hours: int = config.MEASUREMENT_LOOKBACK_HOURS
    min_grade: QualityGrade = QualityGrade(config.MIN_MEASUREMENT_GRADE)
    match_window_minutes: float = config.MATCH_WINDOW_MINUTES

    # Correction
    decay_horizon: float = config.DECAY_HORIZON_STEPS
    hybrid_threshold: float = config.HYBRID_DECAY_THRESHOLD
    max_correction_ratio: float = config.MAX_CORRECTION_RATIO
    max_confidence: float = config.MAX_CONFIDENCE

    # Cache
    bias_cache_ttl_seconds: float = config.BIAS_CACHE_TTL_SECONDS

    # Fallback location
    default_coordinates: Tuple[float, float] = config.DEFAULT_COORDINATES

    @property
    def match_window(self) -> timedelta:
        return timedelta(minutes=self.match_window_minutes)


def validate_base_forecast(base_forecast: Sequence[ForecastPoint]) -> None:
    """Raise InputError if the base forecast is empty or malformed."""
    if not base_forecast:
        raise InputError("Base forecast is empty")
    previous = None
    for i, point in enumerate(base_forecast):
        if not isinstance(point, ForecastPoint):
            raise InputError(f"Forecast point {i} is not a ForecastPoint")
        if not 0.0 <= point.confidence <= 1.0:
            raise InputError(f"Forecast point {i} confidence out of [0, 1]: {point.confidence}")
        if point.aqi < 0:
            raise InputError(f"Forecast point {i} has negative AQI")
        p = point.pollutants
        if min(p.no2, p.o3, p.pm25, p.hcho) < 0:
            raise InputError(f"Forecast point {i} has a negative concentration")
        if previous is not None and point.timestamp <= previous:
            raise InputError(f"Forecast timestamps must be strictly increasing (point {i})")
        previous = point.timestamp


class ForecastValidationEngine:
    """
    Main validation engine.

    Owns the per-station bias correction cache; everything else is
    recomputed per request.
    """

    def __init__(
        self,
        source: GroundTruthSource,
        config: Optional[ValidationConfig] = None,
        resolver=None,
        cache: Optional[BiasCorrectionCache] = None,
    ):
        self.source = source
        self.config = config or ValidationConfig()
        self.resolver = resolver or resolve_location
        self.cache = cache or BiasCorrectionCache(ttl_seconds=self.config.bias_cache_ttl_seconds)

    # =========================================================================
    # Pipeline steps
    # =========================================================================

    def _coordinates(self, location: str) -> Tuple[float, float]:
        try:
            return self.resolver(location)
        except DataUnavailableError as e:
            logger.warning("%s - using default coordinates %s", e, self.config.default_coordinates)
            return self.config.default_coordinates

    def locate_station(self, location: str) -> Optional[Station]:
        lat, lon = self._coordinates(location)
        found = nearest_station_with_distance(self.source.fetch_stations(), lat, lon)
        if found is None:
            return None
        station, distance_km = found
        logger.info("Nearest Pandora station to %s: %s (%.1f km)", location, station.id, distance_km)
        return station

    def bias_correction_for(self, station: Station, measurements: Sequence[Measurement]) -> BiasCorrection:
        cached = self.cache.get(station.id)
        if cached is not None:
            logger.debug("Bias cache hit for %s", station.id)
            return cached

        logger.debug("Bias cache miss for %s", station.id)
        comparison = self.source.fetch_comparison_series(station.id, self.config.lookback_hours)
        correction = estimate_bias_correction(
            station.id,
            measurements,
            comparison,
            window=self.config.match_window,
            max_ratio=self.config.max_correction_ratio,
        )
        self.cache.set(correction)
        return correction

    def apply_validation(
        self,
        base_forecast: Sequence[ForecastPoint],
        correction: BiasCorrection,
        latest_grade: QualityGrade,
    ) -> List[ValidatedForecastPoint]:
        """Decay-weighted correction followed by confidence adjustment."""
        decayed = apply_decay_correction(
            base_forecast,
            correction,
            horizon=self.config.decay_horizon,
            hybrid_threshold=self.config.hybrid_threshold,
        )
        validated = []
        for point, step in zip(base_forecast, decayed):
            confidence = adjust_confidence(
                point.confidence, latest_grade, step.decay, ceiling=self.config.max_confidence
            )
            validated.append(
                ValidatedForecastPoint(
                    timestamp=point.timestamp,
                    aqi=point.aqi,
                    pollutants=step.pollutants,
                    confidence=confidence,
                    quality_grade=grade_point(confidence, step.decay),
                    validation_source=step.validation_source,
                )
            )
        return validated

    # =========================================================================
    # Public API
    # =========================================================================

    def validate_forecast(
        self,
        location: str,
        base_forecast: Sequence[ForecastPoint],
        hours: int = 24,
    ) -> EnhancedForecastResult:
        """
        Validate a base forecast against the nearest Pandora station.

        Raises:
            InputError: malformed base forecast
        """
        validate_base_forecast(base_forecast)
        base_forecast = list(base_forecast)

        try:
            station = self.locate_station(location)
            if station is None:
                raise DataUnavailableError("No Pandora station available")

            recent = self.source.fetch_station_measurements(station.id, self.config.lookback_hours)
            quality = filter_by_quality(recent, self.config.min_grade)
            if not quality:
                raise DataUnavailableError(
                    f"No {QualityGrade(self.config.min_grade).value}-or-better measurements from {station.id}"
                )

            correction = self.bias_correction_for(station, quality)
        except (DataUnavailableError, InputError) as e:
            # The base forecast was checked above: InputError here is bad ground truth
            logger.warning("Validation unavailable for %s: %s", location, e)
            return self.unvalidated_result(location, base_forecast, hours)

        latest_grade = QualityControl.grade(quality[-1])
        validated = self.apply_validation(base_forecast, correction, latest_grade)
        metrics = summarize_validation(base_forecast, validated, quality, stations_used=1)

        logger.info(
            "Validated %d points for %s via %s: coverage %.0f%%, score %.1f",
            len(validated), location, station.id, metrics.coverage, metrics.validation_score,
        )

        return EnhancedForecastResult(
            location=location,
            forecast_hours=hours,
            base_forecast=self._annotate_base(base_forecast),
            validated_forecast=validated,
            metrics=metrics,
            confidence_adjustments=build_confidence_adjustments(base_forecast, validated),
            recommendations=build_recommendations(metrics, station),
            station=station,
            bias_correction=correction,
        )

    def unvalidated_result(
        self,
        location: str,
        base_forecast: Sequence[ForecastPoint],
        hours: int,
    ) -> EnhancedForecastResult:
        """Every point passes through unchanged with model provenance."""
        annotated = self._annotate_base(base_forecast)
        return EnhancedForecastResult(
            location=location,
            forecast_hours=hours,
            base_forecast=annotated,
            validated_forecast=list(annotated),
            metrics=unvalidated_metrics(),
            confidence_adjustments=unvalidated_adjustments(base_forecast),
            recommendations=build_recommendations(unvalidated_metrics(), None),
        )

    @staticmethod
    def _annotate_base(base_forecast: Sequence[ForecastPoint]) -> List[ValidatedForecastPoint]:
        # No ground truth behind the base series: decay 0
        return [
            ValidatedForecastPoint.from_point(p, grade_point(p.confidence, 0.0), ValidationSource.MODEL)
            for p in base_forecast
        ]

    def summarize_measurements(self, measurements: Sequence[Measurement]) -> PandoraDataSummary:
        return summarize_measurements(measurements)

    def detect_anomalies(
        self,
        measurements: Sequence[Measurement],
        channel: str,
        threshold: float = config.ANOMALY_Z_THRESHOLD,
    ) -> List[AnomalyRecord]:
        return detect_anomalies(measurements, channel, threshold)

    def invalidate_bias(self, station_id: Optional[str] = None) -> int:
        return self.cache.invalidate(station_id)


_engine: Optional[ForecastValidationEngine] = None


def get_validation_engine() -> ForecastValidationEngine:
    """Get the global ForecastValidationEngine instance."""
    global _engine
    if _engine is None:
        from collector.pandora_fetcher import PandoraClient

        _engine = ForecastValidationEngine(PandoraClient())
    return _engine
