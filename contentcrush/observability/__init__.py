"""Observability helpers."""

from contentcrush.observability.otel import (
    initialize,
    shutdown,
    start_span,
    record_status_fallback,
    record_unknown_status,
)

__all__ = [
    "initialize",
    "shutdown",
    "start_span",
    "record_status_fallback",
    "record_unknown_status",
]
