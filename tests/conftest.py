from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from goruntime.accumulator import MemoryAccumulator

Handler = Callable[[httpx.Request], httpx.Response]


def runtime_payload(serial: str = "node-1", **memstats_overrides: Any) -> dict[str, Any]:
    memstats: dict[str, Any] = {
        "Alloc": 1024,
        "TotalAlloc": 4096,
        "Sys": 8192,
        "Lookups": 0,
        "Mallocs": 300,
        "Frees": 120,
        "HeapAlloc": 1024,
        "HeapSys": 4096,
        "HeapIdle": 2048,
        "HeapInuse": 2048,
        "HeapReleased": 512,
        "HeapObjects": 180,
        "StackInuse": 32768,
        "StackSys": 32768,
        "MSpanInuse": 1600,
        "MSpanSys": 16384,
        "MCacheInuse": 1200,
        "MCacheSys": 16384,
        "OtherSys": 900,
        "GCSys": 2000,
        "NextGC": 4194304,
        "LastGC": 1700000000000000000,
        "PauseTotalNs": 150000,
        "PauseNs": [0] * 256,
        "NumGC": 0,
        "GCCPUFraction": 0.0001,
    }
    memstats.update(memstats_overrides)
    return {
        "serial": serial,
        "cpuNum": 8,
        "threadNum": 12,
        "goroutineNum": 40,
        "cpuPercent": 23,
        "memPercent": 61,
        "memstats": memstats,
    }


def ok(serial: str) -> Handler:
    def _handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(200, json=runtime_payload(serial))

    return _handler


def routing_transport(routes: dict[str, Handler]) -> httpx.MockTransport:
    def _handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404)
        return route(request)

    return httpx.MockTransport(_handler)


@pytest.fixture()
def acc() -> MemoryAccumulator:
    return MemoryAccumulator()
