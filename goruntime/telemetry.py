from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger("goruntime.telemetry")

FETCH_TOTAL = Counter(
    "goruntime_collector_fetch_total",
    "Endpoint fetches by outcome",
    ["outcome"],
)
FETCH_LATENCY = Histogram(
    "goruntime_collector_fetch_duration_seconds",
    "Duration of one endpoint fetch including decode and emit",
)
CYCLE_LATENCY = Histogram(
    "goruntime_collector_cycle_duration_seconds",
    "Duration of one poll cycle across all endpoints",
)


def serve_metrics(port: int) -> bool:
    if not port:
        return False
    start_http_server(port)
    logger.info("serving collector metrics on port %s", port)
    return True
