"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Built-in telemetry sinks and the backend registry resolving them by id.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

from .telemetry import JSONValue, TelemetryEvent, TelemetrySink, TelemetrySpan, now_ms

SinkFactory = Callable[[], TelemetrySink]

_BACKENDS: dict[str, SinkFactory] = {}
_LOCK = Lock()


class TelemetryBackendError(RuntimeError):
    """Raised when telemetry backend registration/resolution fails."""


class NullTelemetrySink:
    """No-op telemetry sink used as safe runtime default."""

    def record_event(self, event: TelemetryEvent) -> None:
        _ = event

    def start_span(
        self,
        name: str,
        *,
        attributes: dict[str, JSONValue] | None = None,
    ) -> TelemetrySpan | None:
        _ = name
        _ = attributes
        return None

    def end_span(
        self,
        span: TelemetrySpan | None,
        *,
        status: str,
        error: str | None = None,
        attributes: dict[str, JSONValue] | None = None,
    ) -> None:
        _ = span
        _ = status
        _ = error
        _ = attributes


@dataclass(slots=True)
class InMemoryTelemetrySink:
    """
    Telemetry sink keeping coordinator events and run spans in memory.

    Records can be filtered by the ``coordinator`` name label, so several
    coordinators may share one sink.
    """

    _events: list[TelemetryEvent] = field(default_factory=list)
    _spans_closed: list[dict[str, Any]] = field(default_factory=list)

    def record_event(self, event: TelemetryEvent) -> None:
        self._events.append(event)

    def start_span(
        self,
        name: str,
        *,
        attributes: dict[str, JSONValue] | None = None,
    ) -> TelemetrySpan:
        return TelemetrySpan(
            name=name,
            started_at_ms=now_ms(),
            attributes=dict(attributes or {}),
        )

    def end_span(
        self,
        span: TelemetrySpan | None,
        *,
        status: str,
        error: str | None = None,
        attributes: dict[str, JSONValue] | None = None,
    ) -> None:
        if span is None:
            return
        ended_at = now_ms()
        self._spans_closed.append(
            {
                "name": span.name,
                "started_at_ms": span.started_at_ms,
                "ended_at_ms": ended_at,
                "duration_ms": ended_at - span.started_at_ms,
                "status": status,
                "error": error,
                "attributes": {**span.attributes, **dict(attributes or {})},
            }
        )

    def events(
        self,
        name: str | None = None,
        *,
        coordinator: str | None = None,
    ) -> list[TelemetryEvent]:
        return [
            event
            for event in self._events
            if (name is None or event.name == name)
            and _labelled(event.attributes, coordinator)
        ]

    def keys(self, name: str, *, coordinator: str | None = None) -> list[JSONValue]:
        """Return the ``key`` attribute of each matching key event, in order."""
        return [
            event.attributes["key"]
            for event in self.events(name, coordinator=coordinator)
            if "key" in event.attributes
        ]

    def spans(self, *, coordinator: str | None = None) -> list[dict[str, Any]]:
        return [
            span
            for span in self._spans_closed
            if _labelled(span["attributes"], coordinator)
        ]


def _labelled(attributes: dict[str, JSONValue], coordinator: str | None) -> bool:
    return coordinator is None or attributes.get("coordinator") == coordinator


def register_telemetry_backend(backend_id: str, factory: SinkFactory) -> None:
    """Register one sink factory by its stable backend id."""
    key = str(backend_id).strip().lower()
    if not key:
        raise TelemetryBackendError("Telemetry backend id must be non-empty")
    with _LOCK:
        _BACKENDS[key] = factory


def list_telemetry_backends() -> list[str]:
    """Return sorted list of registered telemetry backend ids."""
    with _LOCK:
        return sorted(_BACKENDS.keys())


def create_telemetry_sink(
    backend: str | TelemetrySink | None = None,
) -> TelemetrySink:
    """
    Resolve sink from backend id or passthrough provided sink instance.

    Args:
        backend: Backend id (`null`, `inmemory`) or sink instance.

    Returns:
        Materialized telemetry sink.
    """
    if backend is None:
        backend = "null"
    if not isinstance(backend, str):
        return backend
    key = backend.strip().lower()
    with _LOCK:
        factory = _BACKENDS.get(key)
    if factory is None:
        raise TelemetryBackendError(f"Unknown telemetry backend '{backend}'")
    return factory()


register_telemetry_backend("null", NullTelemetrySink)
register_telemetry_backend("inmemory", InMemoryTelemetrySink)
