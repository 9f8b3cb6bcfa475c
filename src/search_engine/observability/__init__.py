"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from search_engine.observability.context import get_trace_context, set_trace_context, trace_context
from search_engine.observability.logging import JsonFormatter, configure_logging
from search_engine.observability.metrics import (
    CORRUPT_RECORDS,
    DOCUMENTS_INSERTED,
    INSERT_LATENCY,
    SEARCH_LATENCY,
    configure_metrics_exporter,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from search_engine.observability.setup import configure_observability
from search_engine.observability.tracing import configure_trace_exporter, create_span, get_tracer, init_tracing


__all__ = [
    "CORRUPT_RECORDS",
    "DOCUMENTS_INSERTED",
    "INSERT_LATENCY",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "configure_metrics_exporter",
    "configure_observability",
    "configure_trace_exporter",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
