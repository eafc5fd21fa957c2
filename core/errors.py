"""
Error taxonomy for the validation pipeline.

InputError is a caller contract violation and always reaches the caller.
DataUnavailableError means ground truth could not be obtained; the
orchestrator recovers from it by returning an unvalidated forecast.
"""


class InputError(ValueError):
    """Malformed, empty or mismatched input supplied by the caller."""


class DataUnavailableError(RuntimeError):
    """Ground truth (station, measurements, comparison data) is unavailable."""
