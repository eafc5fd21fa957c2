import json
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import validate_cli


def _measurements():
    return [
        {
            "timestamp": f"2026-03-01T{h:02d}:00:00Z",
            "station_id": "pandora_002",
            "no2_column": 100.0,
            "o3_column": 300.0,
            "hcho_column": 8.0,
            "so2_column": 1.0,
            "aerosol_optical_depth": 0.1,
            "water_vapor": 1.5,
            "temperature": 24.0,
            "pressure": 1009.0,
            "solar_zenith_angle": 30.0,
            "quality_flag": 0,
            "uncertainty_percent": 3.0,
        }
        for h in range(6, 12)
    ]


def _write(tmp_path: Path, name: str, data) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_validate_command(tmp_path, capsys):
    forecast = [
        {"timestamp": f"2026-03-01T{12 + i:02d}:00:00Z", "aqi": 70, "pollutants": {"no2": 20.0, "o3": 50.0},
         "confidence": 0.6}
        for i in range(3)
    ]
    comparison = {"samples": [
        {"timestamp": f"2026-03-01T{h:02d}:05:00Z", "no2": 110.0, "o3": 300.0} for h in range(6, 12)
    ]}

    validate_cli.main([
        "validate",
        "--location", "Los Angeles, CA",
        "--forecast", _write(tmp_path, "forecast.json", forecast),
        "--measurements", _write(tmp_path, "pandora.json", {"measurements": _measurements()}),
        "--comparison", _write(tmp_path, "tempo.json", comparison),
        "--hours", "3",
    ])

    result = json.loads(capsys.readouterr().out)
    assert result["validated"] is True
    assert result["station"]["id"] == "pandora_002"
    assert result["bias_correction"]["no2_ratio"] == pytest.approx(-0.1)
    assert result["validated_forecast"][0]["pollutants"]["no2"] == pytest.approx(18.0)


def test_validate_without_ground_truth(tmp_path, capsys):
    forecast = [{"timestamp": "2026-03-01T12:00:00Z", "aqi": 30, "confidence": 0.4}]
    validate_cli.main([
        "validate",
        "--location", "Denver, CO",
        "--forecast", _write(tmp_path, "forecast.json", forecast),
    ])
    result = json.loads(capsys.readouterr().out)
    assert result["validated"] is False
    assert result["validation_metrics"]["validation_score"] == 50.0


def test_summary_command(tmp_path, capsys):
    validate_cli.main(["summary", "--measurements", _write(tmp_path, "pandora.json", _measurements())])
    result = json.loads(capsys.readouterr().out)
    assert result["station_id"] == "pandora_002"
    assert result["data_quality"]["total_measurements"] == 6


def test_anomalies_command(tmp_path, capsys):
    validate_cli.main([
        "anomalies",
        "--measurements", _write(tmp_path, "pandora.json", _measurements()),
        "--channel", "o3",
    ])
    assert json.loads(capsys.readouterr().out) == []
