#!/usr/bin/env python3
"""
Pandora Validation CLI

Run the validation pipeline offline from JSON files.

Usage:
    python validate_cli.py validate --location "New York, NY" --forecast forecast.json \
        --measurements pandora.json --comparison tempo.json
    python validate_cli.py summary --measurements pandora.json
    python validate_cli.py anomalies --measurements pandora.json --channel no2 --threshold 2.5
"""

import argparse
import json
import logging
import sys
from collections import defaultdict
from pathlib import Path
from typing import Any, List

from dotenv import load_dotenv

from config import ANOMALY_Z_THRESHOLD

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger("validate_cli")


def load_json_list(path: str, key: str) -> List[Any]:
    """Read a JSON list, or an object holding the list under ``key``."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise SystemExit(f"{path}: expected a list of {key}")
    return data


def load_measurements(path: str):
    from collector.parsing import parse_measurement
    return [parse_measurement(row) for row in load_json_list(path, "measurements")]


def cmd_validate(args):
    """Validate a base forecast."""
    from collector.pandora_fetcher import StaticGroundTruthSource
    from collector.parsing import parse_comparison_sample, parse_forecast_point, parse_station
    from core.validation_engine import ForecastValidationEngine

    forecast = [parse_forecast_point(row) for row in load_json_list(args.forecast, "forecast")]

    by_station = defaultdict(list)
    if args.measurements:
        for m in load_measurements(args.measurements):
            by_station[m.station_id].append(m)

    comparison = {}
    if args.comparison:
        samples = [parse_comparison_sample(row) for row in load_json_list(args.comparison, "samples")]
        # A comparison file without station ids applies to every station with measurements
        comparison = {station_id: samples for station_id in by_station}

    stations = None
    if args.stations:
        stations = [parse_station(row) for row in load_json_list(args.stations, "stations")]

    source = StaticGroundTruthSource(stations=stations, measurements=by_station, comparison=comparison)
    engine = ForecastValidationEngine(source)

    logger.info(f"Validating {len(forecast)} forecast points for {args.location}")
    result = engine.validate_forecast(args.location, forecast, args.hours)
    print(json.dumps(result.to_dict(), indent=2))


def cmd_summary(args):
    """Summarize a measurement batch."""
    from auditor.pandora_summary import summarize_measurements

    summary = summarize_measurements(load_measurements(args.measurements))
    print(json.dumps(summary.to_dict(), indent=2))


def cmd_anomalies(args):
    """List z-score anomalies for one channel."""
    from auditor.anomaly import detect_anomalies

    anomalies = detect_anomalies(load_measurements(args.measurements), args.channel, args.threshold)
    logger.info(f"{len(anomalies)} anomalies in {args.channel}")
    print(json.dumps([a.to_dict() for a in anomalies], indent=2))


def main(argv=None):
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Pandora forecast validation",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a base forecast")
    validate_parser.add_argument("--location", required=True, help="Location label or 'lat,lon'")
    validate_parser.add_argument("--forecast", required=True, help="Base forecast JSON")
    validate_parser.add_argument("--measurements", help="Pandora measurements JSON")
    validate_parser.add_argument("--comparison", help="Satellite comparison samples JSON")
    validate_parser.add_argument("--stations", help="Station registry JSON (default: configured network)")
    validate_parser.add_argument("--hours", type=int, default=24, help="Forecast hours")

    # Summary command
    summary_parser = subparsers.add_parser("summary", help="Summarize measurements")
    summary_parser.add_argument("--measurements", required=True, help="Pandora measurements JSON")

    # Anomalies command
    anomalies_parser = subparsers.add_parser("anomalies", help="Detect anomalies")
    anomalies_parser.add_argument("--measurements", required=True, help="Pandora measurements JSON")
    anomalies_parser.add_argument("--channel", default="no2", choices=["no2", "o3", "hcho", "so2"])
    anomalies_parser.add_argument("--threshold", type=float, default=ANOMALY_Z_THRESHOLD, help="|z| threshold")

    args = parser.parse_args(argv)

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "summary":
        cmd_summary(args)
    elif args.command == "anomalies":
        cmd_anomalies(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
