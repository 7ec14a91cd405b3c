from __future__ import annotations

import threading
from typing import Protocol

from shared.schemas import ErrorReport, Measurement


class Accumulator(Protocol):
    """Sink for gathered measurements. Called concurrently from gather tasks."""

    def add_gauge(self, measurement: str, fields: dict[str, int | float], tags: dict[str, str]) -> None:
        """Accept one measurement."""

    def add_error(self, report: ErrorReport) -> None:
        """Accept one non-fatal endpoint error."""


class MemoryAccumulator:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.measurements: list[Measurement] = []
        self.errors: list[ErrorReport] = []

    def add_gauge(self, measurement: str, fields: dict[str, int | float], tags: dict[str, str]) -> None:
        item = Measurement(name=measurement, fields=dict(fields), tags=dict(tags))
        with self._lock:
            self.measurements.append(item)

    def add_error(self, report: ErrorReport) -> None:
        with self._lock:
            self.errors.append(report)

    def drain(self) -> tuple[list[Measurement], list[ErrorReport]]:
        with self._lock:
            measurements, self.measurements = self.measurements, []
            errors, self.errors = self.errors, []
        return measurements, errors
