"""Output formatting and export."""

from .console import ConsoleOutput
from .export import Exporter
from .telemetry import TelemetryRecorder, lead_changes, telemetry_frame

__all__ = [
    "ConsoleOutput",
    "Exporter",
    "TelemetryRecorder",
    "lead_changes",
    "telemetry_frame",
]
