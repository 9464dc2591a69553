"""Prometheus metrics for the search pipeline.

Counters and histograms are module-level singletons registered in the default
registry. The HTTP exporter is never started on import; long-running entry
points call ``ensure_metrics_exporter`` explicitly.
"""

from __future__ import annotations

import os
import threading
from typing import Final

from prometheus_client import Counter, Histogram, start_http_server

from src.config.logging_config import get_logger

logger = get_logger(__name__)

SEARCH_REQUESTS_TOTAL: Final[Counter] = Counter(
    "search_requests_total",
    "Total number of search requests by outcome",
    labelnames=("outcome",),
)

SEARCH_STAGE_DURATION_SECONDS: Final[Histogram] = Histogram(
    "search_stage_duration_seconds",
    "Duration of search pipeline stages in seconds",
    labelnames=("stage",),
)

DATE_FALLBACK_TOTAL: Final[Counter] = Counter(
    "date_fallback_total",
    "AI date fallback invocations by result",
    labelnames=("result",),
)

INTENT_CLASSIFICATIONS_TOTAL: Final[Counter] = Counter(
    "intent_classifications_total",
    "Inbound message intent classifications",
    labelnames=("intent",),
)

_EXPORTER_LOCK = threading.Lock()
_EXPORTER_STARTED = False
_DEFAULT_METRICS_PORT: Final[int] = 9000
_METRICS_PORT_ENV: Final[str] = "METRICS_PORT"


def _resolve_metrics_port() -> int:
    port_raw = os.getenv(_METRICS_PORT_ENV)
    try:
        return int(port_raw) if port_raw else _DEFAULT_METRICS_PORT
    except ValueError:
        logger.warning("invalid_metrics_port", port=port_raw)
        return _DEFAULT_METRICS_PORT


def ensure_metrics_exporter(port: int | None = None) -> None:
    """Start Prometheus HTTP exporter once per process.

    Args:
        port: Port to bind (default: METRICS_PORT env var or 9000)
    """

    global _EXPORTER_STARTED
    with _EXPORTER_LOCK:
        if _EXPORTER_STARTED:
            return

        resolved_port = port or _resolve_metrics_port()

        try:
            start_http_server(resolved_port)
        except OSError as exc:
            logger.error(
                "metrics_exporter_start_failed",
                port=resolved_port,
                error=str(exc),
            )
            raise

        _EXPORTER_STARTED = True
        logger.info("metrics_exporter_started", port=resolved_port)


__all__ = [
    "DATE_FALLBACK_TOTAL",
    "INTENT_CLASSIFICATIONS_TOTAL",
    "SEARCH_REQUESTS_TOTAL",
    "SEARCH_STAGE_DURATION_SECONDS",
    "ensure_metrics_exporter",
]
