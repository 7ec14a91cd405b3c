from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, Strict, field_validator, model_validator

from shared.constants import PAUSE_HISTORY_LEN
from shared.enums import ErrorKind

# Runtime counters are uint64, the rest int64; JSON strings or floats in their place are rejected.
Unsigned = Annotated[int, Strict(), Field(ge=0, le=(1 << 64) - 1)]
SignedInt = Annotated[int, Strict(), Field(ge=-(1 << 63), le=(1 << 63) - 1)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, value: Any) -> Any:
        # null decodes to the zero value
        if value is None:
            return {}
        if isinstance(value, dict):
            return {key: item for key, item in value.items() if item is not None}
        return value


class MemoryStats(_Payload):
    """Runtime memory statistics as exposed by the monitored process."""

    alloc: Unsigned = Field(default=0, alias="Alloc")
    total_alloc: Unsigned = Field(default=0, alias="TotalAlloc")
    sys: Unsigned = Field(default=0, alias="Sys")
    lookups: Unsigned = Field(default=0, alias="Lookups")
    mallocs: Unsigned = Field(default=0, alias="Mallocs")
    frees: Unsigned = Field(default=0, alias="Frees")

    heap_alloc: Unsigned = Field(default=0, alias="HeapAlloc")
    heap_sys: Unsigned = Field(default=0, alias="HeapSys")
    heap_idle: Unsigned = Field(default=0, alias="HeapIdle")
    heap_inuse: Unsigned = Field(default=0, alias="HeapInuse")
    heap_released: Unsigned = Field(default=0, alias="HeapReleased")
    heap_objects: Unsigned = Field(default=0, alias="HeapObjects")

    stack_inuse: Unsigned = Field(default=0, alias="StackInuse")
    stack_sys: Unsigned = Field(default=0, alias="StackSys")
    mspan_inuse: Unsigned = Field(default=0, alias="MSpanInuse")
    mspan_sys: Unsigned = Field(default=0, alias="MSpanSys")
    mcache_inuse: Unsigned = Field(default=0, alias="MCacheInuse")
    mcache_sys: Unsigned = Field(default=0, alias="MCacheSys")
    other_sys: Unsigned = Field(default=0, alias="OtherSys")

    gc_sys: Unsigned = Field(default=0, alias="GCSys")
    next_gc: Unsigned = Field(default=0, alias="NextGC")
    last_gc: Unsigned = Field(default=0, alias="LastGC")
    pause_total_ns: Unsigned = Field(default=0, alias="PauseTotalNs")
    pause_ns: tuple[Unsigned, ...] = Field(default=(0,) * PAUSE_HISTORY_LEN, alias="PauseNs")
    num_gc: Unsigned = Field(default=0, alias="NumGC")
    gc_cpu_fraction: Annotated[float, Strict()] = Field(default=0.0, alias="GCCPUFraction", allow_inf_nan=False)

    @field_validator("pause_ns", mode="before")
    @classmethod
    def fit_pause_history(cls, value: Any) -> Any:
        # Fixed-size ring: short arrays are zero-filled, extra entries dropped.
        if isinstance(value, (list, tuple)):
            entries = [0 if item is None else item for item in value[:PAUSE_HISTORY_LEN]]
            entries.extend([0] * (PAUSE_HISTORY_LEN - len(entries)))
            return tuple(entries)
        return value


class RuntimeSnapshot(_Payload):
    serial: Annotated[str, Strict()] = ""
    cpu_num: SignedInt = Field(default=0, alias="cpuNum")
    thread_num: SignedInt = Field(default=0, alias="threadNum")
    goroutine_num: SignedInt = Field(default=0, alias="goroutineNum")
    cpu_percent: SignedInt = Field(default=0, alias="cpuPercent")
    mem_percent: SignedInt = Field(default=0, alias="memPercent")
    memstats: MemoryStats = Field(default_factory=MemoryStats)


class MeasurementRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    fields: dict[str, int | float]
    tags: dict[str, str]


class Measurement(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    fields: dict[str, int | float]
    tags: dict[str, str] = Field(default_factory=dict)
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ErrorReport(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str
    kind: ErrorKind
    detail: str

    def __str__(self) -> str:
        return f"[url={self.url}]: {self.detail}"
