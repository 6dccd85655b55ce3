"""Telemetry and logging subsystem package."""
from .events import DailySpinSummary, SpinRecord, TelemetryEvent
from .logging_setup import JsonFormatter, configure_logging
from .storage import TelemetryStorage, default_storage

__all__ = [
    "DailySpinSummary",
    "JsonFormatter",
    "SpinRecord",
    "TelemetryEvent",
    "TelemetryStorage",
    "configure_logging",
    "default_storage",
]
