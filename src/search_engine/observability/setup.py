"""Startup wiring from ``Settings`` into logging, tracing and metrics."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from search_engine.observability.logging import configure_logging
from search_engine.observability.metrics import configure_metrics_exporter
from search_engine.observability.tracing import configure_trace_exporter


if TYPE_CHECKING:
    from search_engine.config import Settings

logger = logging.getLogger(__name__)


def configure_observability(settings: Settings) -> None:
    """Apply the logging and OTLP export settings once at process start."""
    configure_logging(settings.log_level, json_output=settings.log_json)
    configure_metrics_exporter(settings)
    configure_trace_exporter(settings)
    logger.debug(
        "Observability configured (level=%s, json=%s, export=%s)",
        settings.log_level,
        settings.log_json,
        settings.is_observability_export_enabled(),
    )
