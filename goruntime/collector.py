from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait

import httpx
from pydantic import ValidationError

from goruntime.accumulator import Accumulator
from goruntime.client import LazyClient
from goruntime.config import CollectorConfig, EndpointConfig
from goruntime.metric import flatten
from goruntime.telemetry import CYCLE_LATENCY, FETCH_LATENCY, FETCH_TOTAL
from shared.enums import ErrorKind
from shared.schemas import ErrorReport, RuntimeSnapshot

logger = logging.getLogger("goruntime.collector")


class GatherError(Exception):
    kind = ErrorKind.INTERNAL


class TransportError(GatherError):
    kind = ErrorKind.TRANSPORT


class StatusError(GatherError):
    kind = ErrorKind.STATUS

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(
            f"Received status code {status_code} ({httpx.codes.get_reason_phrase(status_code)}), "
            f"expected {httpx.codes.OK.value} ({httpx.codes.get_reason_phrase(httpx.codes.OK)})"
        )


class DecodeError(GatherError):
    kind = ErrorKind.DECODE


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors(include_url=False)[0]
    location = ".".join(str(part) for part in first["loc"]) or "body"
    return f"invalid runtime stats payload at {location}: {first['msg']}"


class GoRuntimeCollector:
    """Reads runtime statistics from every configured endpoint once per gather."""

    def __init__(self, config: CollectorConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self.endpoints = config.endpoints()
        self.client = LazyClient(config, transport=transport)

    def gather(self, acc: Accumulator) -> None:
        """Fetch all endpoints concurrently and block until every fetch finished.

        Endpoint failures are reported through ``acc.add_error`` and never stop
        the other fetches. Only client construction errors propagate.
        """
        if not self.endpoints:
            return
        client = self.client.get()
        started = time.monotonic()
        with ThreadPoolExecutor(max_workers=len(self.endpoints), thread_name_prefix="goruntime-gather") as pool:
            futures = [pool.submit(self._gather_endpoint, client, acc, endpoint) for endpoint in self.endpoints]
            wait(futures)
        duration = time.monotonic() - started
        CYCLE_LATENCY.observe(duration)
        logger.debug("gather cycle done endpoints=%s duration=%.3fs", len(self.endpoints), duration)

    def _gather_endpoint(self, client: httpx.Client, acc: Accumulator, endpoint: EndpointConfig) -> None:
        started = time.monotonic()
        try:
            self.gather_url(client, acc, endpoint)
        except GatherError as exc:
            self._report(acc, endpoint, exc.kind, str(exc))
        except Exception as exc:
            logger.exception("unexpected failure gathering url=%s", endpoint.url)
            self._report(acc, endpoint, ErrorKind.INTERNAL, f"{exc.__class__.__name__}: {exc}")
        else:
            FETCH_TOTAL.labels(outcome="ok").inc()
        finally:
            FETCH_LATENCY.observe(time.monotonic() - started)

    def _report(self, acc: Accumulator, endpoint: EndpointConfig, kind: ErrorKind, detail: str) -> None:
        FETCH_TOTAL.labels(outcome=kind.value).inc()
        report = ErrorReport(url=endpoint.url, kind=kind, detail=detail)
        logger.debug("gather failed %s", report, extra={"url": endpoint.url, "kind": kind.value})
        acc.add_error(report)

    def _read_body(self, client: httpx.Client, endpoint: EndpointConfig, auth: httpx.BasicAuth | None) -> bytes:
        # timeout_seconds bounds the whole request, not each read
        deadline = time.monotonic() + endpoint.timeout_seconds
        timed_out = f"request timed out after {endpoint.timeout_seconds}s"
        body = bytearray()
        try:
            with client.stream(endpoint.method, endpoint.url, auth=auth, timeout=endpoint.timeout_seconds) as response:
                if response.status_code != httpx.codes.OK:
                    raise StatusError(response.status_code)
                for chunk in response.iter_bytes():
                    if time.monotonic() > deadline:
                        raise TransportError(timed_out)
                    body.extend(chunk)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        if time.monotonic() > deadline:
            raise TransportError(timed_out)
        return bytes(body)

    def gather_url(self, client: httpx.Client, acc: Accumulator, endpoint: EndpointConfig) -> None:
        auth = httpx.BasicAuth(endpoint.username, endpoint.password) if endpoint.has_credentials else None
        body = self._read_body(client, endpoint, auth)

        try:
            snapshot = RuntimeSnapshot.model_validate_json(body)
        except ValidationError as exc:
            raise DecodeError(_describe_validation_error(exc)) from exc

        record = flatten(snapshot)
        acc.add_gauge(endpoint.measurement_name, record.fields, record.tags)

    def close(self) -> None:
        self.client.close()
