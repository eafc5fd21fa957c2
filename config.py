"""
Pandora Forecast Validation - Configuration
Central configuration for the ground-truth network and validation tunables.
"""

import os as _os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple


# ============================================================================
# PANDORA NETWORK CONFIGURATION
# ============================================================================

@dataclass(frozen=True)
class PandoraStationConfig:
    """Ground-truth station metadata used when no live registry is available."""
    station_id: str
    name: str
    latitude: float
    longitude: float
    elevation: float
    instruments: FrozenSet[str] = field(default_factory=frozenset)
    country: str = "USA"
    region: str = "North America"
    status: str = "active"


PANDORA_STATIONS: Dict[str, PandoraStationConfig] = {
    "pandora_001": PandoraStationConfig(
        station_id="pandora_001",
        name="Greenbelt, MD",
        latitude=39.0014,
        longitude=-76.8778,
        elevation=87,
        instruments=frozenset({"Pandora 2S", "MAX-DOAS"}),
    ),
    "pandora_002": PandoraStationConfig(
        station_id="pandora_002",
        name="Los Angeles, CA",
        latitude=34.0522,
        longitude=-118.2437,
        elevation=71,
        instruments=frozenset({"Pandora 2S"}),
    ),
    "pandora_003": PandoraStationConfig(
        station_id="pandora_003",
        name="New York, NY",
        latitude=40.7128,
        longitude=-74.0060,
        elevation=10,
        instruments=frozenset({"Pandora 2S", "Brewer"}),
    ),
    "pandora_004": PandoraStationConfig(
        station_id="pandora_004",
        name="Chicago, IL",
        latitude=41.8781,
        longitude=-87.6298,
        elevation=181,
        instruments=frozenset({"Pandora 2S"}),
    ),
    "pandora_005": PandoraStationConfig(
        station_id="pandora_005",
        name="Denver, CO",
        latitude=39.7392,
        longitude=-104.9903,
        elevation=1609,
        instruments=frozenset({"Pandora 2S"}),
    ),
}

# ============================================================================
# API ENDPOINTS
# ============================================================================

# Pandora network JSON API
PANDORA_API_URL = _os.environ.get("PANDORA_API_URL", "https://pandora.gsfc.nasa.gov/api/v1")
PANDORA_API_KEY = _os.environ.get("PANDORA_API_KEY", "")
PANDORA_HTTP_TIMEOUT_SECONDS = float(_os.environ.get("PANDORA_HTTP_TIMEOUT_SECONDS", "10"))

# ============================================================================
# LOCATION RESOLUTION
# ============================================================================

LOCATION_COORDINATES: Dict[str, Tuple[float, float]] = {
    "Los Angeles, CA": (34.0522, -118.2437),
    "New York, NY": (40.7128, -74.0060),
    "Chicago, IL": (41.8781, -87.6298),
    "Denver, CO": (39.7392, -104.9903),
    "Greenbelt, MD": (39.0014, -76.8778),
}

# Geographic center of the contiguous US
DEFAULT_COORDINATES: Tuple[float, float] = (40.0, -100.0)

# ============================================================================
# VALIDATION TUNABLES
# ============================================================================

# Hours of ground truth requested per validation
MEASUREMENT_LOOKBACK_HOURS = 48

# Minimum measurement grade kept for bias estimation
MIN_MEASUREMENT_GRADE = "good"

# Ground truth / comparison pairing tolerance (minutes)
MATCH_WINDOW_MINUTES = 30

# e-folding horizon of ground-truth influence (forecast steps)
DECAY_HORIZON_STEPS = 12.0

# Decay above which a point counts as ground-truth backed
HYBRID_DECAY_THRESHOLD = 0.3

# Adjusted confidence never exceeds this
MAX_CONFIDENCE = 0.95

# Fractional correction cap per pollutant
MAX_CORRECTION_RATIO = 0.5

# Score reported when no ground truth is available
UNVALIDATED_SCORE = 50.0

# Bias cache expiry (seconds); 0 keeps entries until invalidated
BIAS_CACHE_TTL_SECONDS = float(_os.environ.get("PANDORA_BIAS_CACHE_TTL_SECONDS", str(6 * 3600)))

# Anomaly z-score threshold
ANOMALY_Z_THRESHOLD = 3.0
