# Load environment variables FIRST (before any other imports)
from __future__ import annotations

from dotenv import load_dotenv
load_dotenv()

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
# Silence verbose loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logger = logging.getLogger("web_server")

from collector.parsing import parse_forecast_point, parse_measurement
from config import ANOMALY_Z_THRESHOLD
from core.errors import DataUnavailableError, InputError
from core.validation_engine import get_validation_engine

app = FastAPI(title="Pandora Forecast Validation")


# Request models
class PollutantsIn(BaseModel):
    no2: float = 0.0
    o3: float = 0.0
    pm25: float = 0.0
    hcho: float = 0.0


class ForecastPointIn(BaseModel):
    timestamp: str
    aqi: int
    pollutants: PollutantsIn = Field(default_factory=PollutantsIn)
    confidence: float


class MeasurementIn(BaseModel):
    timestamp: str
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
    quality_flag: str = "good"
    uncertainty_percent: float = 0.0


class ValidateRequest(BaseModel):
    location: str
    hours: int = 24
    base_forecast: List[ForecastPointIn]


class MeasurementsRequest(BaseModel):
    measurements: List[MeasurementIn]


class AnomalyRequest(MeasurementsRequest):
    channel: str = "no2"
    threshold: float = ANOMALY_Z_THRESHOLD


class CacheInvalidateRequest(BaseModel):
    station_id: Optional[str] = None


@app.exception_handler(InputError)
async def input_error_handler(request: Request, exc: InputError):
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"error": str(exc)})


@app.get("/api/stations")
def get_stations():
    """Return the Pandora stations known to the engine."""
    engine = get_validation_engine()
    try:
        stations = engine.source.fetch_stations()
    except DataUnavailableError as e:
        logger.warning("Station list unavailable: %s", e)
        return JSONResponse(status_code=503, content={"error": str(e)})
    return [s.to_dict() for s in stations]


@app.post("/api/v1/forecast/validate")
def validate_forecast(body: ValidateRequest) -> Dict[str, Any]:
    """Validate a base forecast against the nearest Pandora station."""
    base = [parse_forecast_point(p.model_dump()) for p in body.base_forecast]
    result = get_validation_engine().validate_forecast(body.location, base, body.hours)
    return result.to_dict()


@app.post("/api/v1/measurements/summary")
def measurements_summary(body: MeasurementsRequest) -> Dict[str, Any]:
    measurements = [parse_measurement(m.model_dump()) for m in body.measurements]
    return get_validation_engine().summarize_measurements(measurements).to_dict()


@app.post("/api/v1/measurements/anomalies")
def measurements_anomalies(body: AnomalyRequest) -> Dict[str, Any]:
    measurements = [parse_measurement(m.model_dump()) for m in body.measurements]
    anomalies = get_validation_engine().detect_anomalies(measurements, body.channel, body.threshold)
    return {
        "channel": body.channel,
        "threshold": body.threshold,
        "count": len(anomalies),
        "anomalies": [a.to_dict() for a in anomalies],
    }


@app.post("/api/v1/cache/invalidate")
def invalidate_cache(body: CacheInvalidateRequest) -> Dict[str, Any]:
    removed = get_validation_engine().invalidate_bias(body.station_id)
    return {"station_id": body.station_id, "removed": removed}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
