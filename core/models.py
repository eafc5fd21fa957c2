"""
Validation data models.

Shared by the quality scorer, aggregator, corrector, summarizer and API.
Ground-truth and forecast inputs are frozen: every correction builds a new
object instead of mutating the one it was given.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")


class QualityFlag(str, Enum):
    GOOD = "good"
    QUESTIONABLE = "questionable"
    BAD = "bad"

    @property
    def severity(self) -> int:
        return _FLAG_SEVERITY[self]

    @classmethod
    def from_code(cls, code: Any) -> "QualityFlag":
        """Accept the network's numeric flags (0/1/2) as well as names."""
        if isinstance(code, QualityFlag):
            return code
        if isinstance(code, int) and not isinstance(code, bool):
            for flag, severity in _FLAG_SEVERITY.items():
                if severity == code:
                    return flag
            raise ValueError(f"Unknown quality flag code: {code}")
        return cls(str(code).strip().lower())


_FLAG_SEVERITY = {
    QualityFlag.GOOD: 0,
    QualityFlag.QUESTIONABLE: 1,
    QualityFlag.BAD: 2,
}


class QualityGrade(str, Enum):
    """Measurement grade; each grade carries its minimum score."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def threshold(self) -> int:
        return _GRADE_THRESHOLDS[self]


# Highest threshold first: grade lookup walks this order.
_GRADE_THRESHOLDS = {
    QualityGrade.EXCELLENT: 90,
    QualityGrade.GOOD: 75,
    QualityGrade.FAIR: 60,
    QualityGrade.POOR: 0,
}


class StationStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class PointGrade(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ValidationSource(str, Enum):
    MODEL = "model"
    HYBRID = "hybrid"


POLLUTANT_CHANNELS = ("no2", "o3", "hcho", "so2")


@dataclass(frozen=True)
class Measurement:
    """One Pandora ground-truth reading. Column densities in molecules/cm²."""
    timestamp: datetime
    station_id: str
    no2: float
    o3: float
    hcho: float
    so2: float
    aerosol_optical_depth: float
    water_vapor: float
    temperature: float
    pressure: float
    solar_zenith_angle: float
    quality_flag: QualityFlag = QualityFlag.GOOD
    uncertainty_percent: float = 0.0

    def channel(self, name: str) -> float:
        return float(getattr(self, name))

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["timestamp"] = self.timestamp.isoformat()
        d["quality_flag"] = self.quality_flag.value
        return d


@dataclass(frozen=True)
class Station:
    id: str
    name: str
    latitude: float
    longitude: float
    elevation: float = 0.0
    status: StationStatus = StationStatus.ACTIVE
    instruments: FrozenSet[str] = field(default_factory=frozenset)
    country: str = ""
    region: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "elevation": self.elevation,
            "status": self.status.value,
            "instruments": sorted(self.instruments),
            "country": self.country,
            "region": self.region,
        }


@dataclass(frozen=True)
class Pollutants:
    """Forecast surface concentrations."""
    no2: float = 0.0
    o3: float = 0.0
    pm25: float = 0.0
    hcho: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ForecastPoint:
    """One sample of the opaque base forecast."""
    timestamp: datetime
    aqi: int
    pollutants: Pollutants
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "aqi": self.aqi,
            "pollutants": self.pollutants.to_dict(),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ValidatedForecastPoint(ForecastPoint):
    quality_grade: PointGrade = PointGrade.LOW
    validation_source: ValidationSource = ValidationSource.MODEL

    @classmethod
    def from_point(
        cls,
        point: ForecastPoint,
        quality_grade: PointGrade,
        validation_source: ValidationSource = ValidationSource.MODEL,
        **changes: Any,
    ) -> "ValidatedForecastPoint":
        validated = cls(
            timestamp=point.timestamp,
            aqi=point.aqi,
            pollutants=point.pollutants,
            confidence=point.confidence,
            quality_grade=quality_grade,
            validation_source=validation_source,
        )
        return replace(validated, **changes) if changes else validated

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["quality_grade"] = self.quality_grade.value
        d["validation_source"] = self.validation_source.value
        return d


@dataclass(frozen=True)
class ComparisonSample:
    """Satellite or model column densities aligned against ground truth."""
    timestamp: datetime
    no2: float
    o3: float


@dataclass(frozen=True)
class BiasCorrection:
    """Signed fractional corrections for one station."""
    station_id: str
    no2_ratio: float = 0.0
    o3_ratio: float = 0.0
    matched_pairs: int = 0
    computed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def ratio_for(self, pollutant: str) -> float:
        if pollutant == "no2":
            return self.no2_ratio
        if pollutant == "o3":
            return self.o3_ratio
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "no2_ratio": self.no2_ratio,
            "o3_ratio": self.o3_ratio,
            "matched_pairs": self.matched_pairs,
            "computed_at": self.computed_at.isoformat(),
        }


@dataclass
class ValidationMetrics:
    stations_used: int = 0
    coverage: float = 0.0
    no2_bias: float = 0.0
    o3_bias: float = 0.0
    systematic_error: float = 0.0
    uncertainty_reduction: float = 0.0
    validation_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stations_used": self.stations_used,
            "validation_coverage": round(self.coverage, 2),
            "bias_corrections": {
                "no2_bias": self.no2_bias,
                "o3_bias": self.o3_bias,
                "systematic_error": self.systematic_error,
            },
            "uncertainty_reduction": round(self.uncertainty_reduction, 2),
            "validation_score": round(self.validation_score, 2),
        }


@dataclass
class ConfidenceAdjustment:
    timestamp: datetime
    original_confidence: float
    adjusted_confidence: float
    reason: str
    influence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["timestamp"] = self.timestamp.isoformat()
        return d


@dataclass
class EnhancedForecastResult:
    location: str
    forecast_hours: int
    base_forecast: List[ValidatedForecastPoint]
    validated_forecast: List[ValidatedForecastPoint]
    metrics: ValidationMetrics
    confidence_adjustments: List[ConfidenceAdjustment]
    recommendations: List[str]
    station: Optional[Station] = None
    bias_correction: Optional[BiasCorrection] = None

    @property
    def validated(self) -> bool:
        return self.station is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "forecast_hours": self.forecast_hours,
            "validated": self.validated,
            "station": self.station.to_dict() if self.station else None,
            "bias_correction": self.bias_correction.to_dict() if self.bias_correction else None,
            "base_forecast": [p.to_dict() for p in self.base_forecast],
            "validated_forecast": [p.to_dict() for p in self.validated_forecast],
            "validation_metrics": self.metrics.to_dict(),
            "confidence_adjustments": [a.to_dict() for a in self.confidence_adjustments],
            "recommendations": list(self.recommendations),
        }
