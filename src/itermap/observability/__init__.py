"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Telemetry and metrics hooks for coordinator runs.
"""

from .metrics import (
    CoordinatorMetrics,
    NoOpCoordinatorMetrics,
    PrometheusCoordinatorMetrics,
)
from .sinks import (
    InMemoryTelemetrySink,
    NullTelemetrySink,
    TelemetryBackendError,
    create_telemetry_sink,
    list_telemetry_backends,
    register_telemetry_backend,
)
from .telemetry import JSONValue, TelemetryEvent, TelemetrySink, TelemetrySpan

__all__ = [
    "CoordinatorMetrics",
    "NoOpCoordinatorMetrics",
    "PrometheusCoordinatorMetrics",
    "TelemetryEvent",
    "TelemetrySpan",
    "TelemetrySink",
    "JSONValue",
    "NullTelemetrySink",
    "InMemoryTelemetrySink",
    "TelemetryBackendError",
    "create_telemetry_sink",
    "list_telemetry_backends",
    "register_telemetry_backend",
]
