from __future__ import annotations

from contextlib import contextmanager

from opentelemetry import trace as _otel_trace


class Tracer:
    """Light wrapper around OpenTelemetry tracer."""

    def __init__(self, name: str = "adbroot") -> None:
        self._tracer = _otel_trace.get_tracer(name)

    @contextmanager
    def start_span(self, name: str, **attributes):
        with self._tracer.start_as_current_span(name) as span:
            for key, value in attributes.items():
                span.set_attribute(key, value)
            yield span
