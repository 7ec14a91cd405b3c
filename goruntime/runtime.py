from __future__ import annotations

import logging
import threading
from typing import Any, TextIO

import httpx

from goruntime.accumulator import MemoryAccumulator
from goruntime.collector import GoRuntimeCollector
from goruntime.config import CollectorConfig
from goruntime.telemetry import serve_metrics
from shared.serialization import canonical_json_text

logger = logging.getLogger("goruntime.runtime")


def run_once(collector: GoRuntimeCollector, stream: TextIO) -> dict[str, Any]:
    acc = MemoryAccumulator()
    collector.gather(acc)
    measurements, errors = acc.drain()
    for measurement in measurements:
        stream.write(canonical_json_text(measurement) + "\n")
    stream.flush()
    for report in errors:
        logger.warning("gather error %s", report, extra={"url": report.url, "kind": report.kind.value})
    return {
        "endpoints": len(collector.endpoints),
        "measurements": len(measurements),
        "errors": len(errors),
    }


def run_daemon(
    config: CollectorConfig,
    stop_event: threading.Event,
    stream: TextIO,
    transport: httpx.BaseTransport | None = None,
) -> None:
    collector = GoRuntimeCollector(config, transport=transport)
    serve_metrics(config.metrics_port)
    try:
        while not stop_event.is_set():
            try:
                summary = run_once(collector, stream)
                logger.info("cycle summary=%s", summary)
            except Exception:
                logger.exception("poll cycle failed")
            stop_event.wait(timeout=config.interval_seconds)
    finally:
        collector.close()
