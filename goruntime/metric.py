"""Flatten a runtime statistics payload into gauge fields.

Every field below is always emitted so downstream schemas never see a
partially populated record.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from shared.constants import PAUSE_HISTORY_LEN
from shared.schemas import MeasurementRecord, MemoryStats, RuntimeSnapshot

_UINT64_MASK = (1 << 64) - 1
_INT64_MAX = (1 << 63) - 1


def to_int64(value: int) -> int:
    """Cast to the signed 64-bit range, wrapping like a two's-complement int64."""
    value &= _UINT64_MASK
    if value > _INT64_MAX:
        value -= 1 << 64
    return value


def last_pause_index(num_gc: int) -> int:
    """Slot holding the most recently completed GC pause.

    The runtime writes pause ``n`` at ``n % 256`` and then bumps the count, so
    the latest pause sits one slot behind the next write position. With no GC
    yet this resolves to slot 255, which is zero in a fresh buffer.
    """
    return (num_gc + PAUSE_HISTORY_LEN - 1) % PAUSE_HISTORY_LEN


class Fields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    serial: str = ""

    # CPU
    num_cpu: int = Field(default=0, serialization_alias="cpu.count")
    num_thread: int = Field(default=0, serialization_alias="cpu.thread")
    num_goroutine: int = Field(default=0, serialization_alias="cpu.goroutines")
    num_cgo_call: int = Field(default=0, serialization_alias="cpu.cgo_calls")

    cpu_percent: int = Field(default=0, serialization_alias="cpu.percent")
    mem_percent: int = Field(default=0, serialization_alias="mem.percent")

    # General
    alloc: int = Field(default=0, serialization_alias="mem.alloc")
    total_alloc: int = Field(default=0, serialization_alias="mem.total")
    sys: int = Field(default=0, serialization_alias="mem.sys")
    lookups: int = Field(default=0, serialization_alias="mem.lookups")
    mallocs: int = Field(default=0, serialization_alias="mem.malloc")
    frees: int = Field(default=0, serialization_alias="mem.frees")

    # Heap
    heap_alloc: int = Field(default=0, serialization_alias="mem.heap.alloc")
    heap_sys: int = Field(default=0, serialization_alias="mem.heap.sys")
    heap_idle: int = Field(default=0, serialization_alias="mem.heap.idle")
    heap_inuse: int = Field(default=0, serialization_alias="mem.heap.inuse")
    heap_released: int = Field(default=0, serialization_alias="mem.heap.released")
    heap_objects: int = Field(default=0, serialization_alias="mem.heap.objects")

    # Stack
    stack_inuse: int = Field(default=0, serialization_alias="mem.stack.inuse")
    stack_sys: int = Field(default=0, serialization_alias="mem.stack.sys")
    mspan_inuse: int = Field(default=0, serialization_alias="mem.stack.mspan_inuse")
    mspan_sys: int = Field(default=0, serialization_alias="mem.stack.mspan_sys")
    mcache_inuse: int = Field(default=0, serialization_alias="mem.stack.mcache_inuse")
    mcache_sys: int = Field(default=0, serialization_alias="mem.stack.mcache_sys")

    other_sys: int = Field(default=0, serialization_alias="mem.othersys")

    # GC
    gc_sys: int = Field(default=0, serialization_alias="mem.gc.sys")
    next_gc: int = Field(default=0, serialization_alias="mem.gc.next")
    last_gc: int = Field(default=0, serialization_alias="mem.gc.last")
    pause_total_ns: int = Field(default=0, serialization_alias="mem.gc.pause_total")
    pause_ns: int = Field(default=0, serialization_alias="mem.gc.pause")
    num_gc: int = Field(default=0, serialization_alias="mem.gc.count")
    gc_cpu_fraction: float = Field(default=0.0, serialization_alias="mem.gc.cpu_fraction")

    def tags(self) -> dict[str, str]:
        return {"serial": self.serial}

    def values(self) -> dict[str, int | float]:
        return self.model_dump(by_alias=True, exclude={"serial"})


def collect_mem_stats(fields: Fields, memstats: MemoryStats) -> None:
    # General
    fields.alloc = to_int64(memstats.alloc)
    fields.total_alloc = to_int64(memstats.total_alloc)
    fields.sys = to_int64(memstats.sys)
    fields.lookups = to_int64(memstats.lookups)
    fields.mallocs = to_int64(memstats.mallocs)
    fields.frees = to_int64(memstats.frees)

    # Heap
    fields.heap_alloc = to_int64(memstats.heap_alloc)
    fields.heap_sys = to_int64(memstats.heap_sys)
    fields.heap_idle = to_int64(memstats.heap_idle)
    fields.heap_inuse = to_int64(memstats.heap_inuse)
    fields.heap_released = to_int64(memstats.heap_released)
    fields.heap_objects = to_int64(memstats.heap_objects)

    # Stack
    fields.stack_inuse = to_int64(memstats.stack_inuse)
    fields.stack_sys = to_int64(memstats.stack_sys)
    fields.mspan_inuse = to_int64(memstats.mspan_inuse)
    fields.mspan_sys = to_int64(memstats.mspan_sys)
    fields.mcache_inuse = to_int64(memstats.mcache_inuse)
    fields.mcache_sys = to_int64(memstats.mcache_sys)

    fields.other_sys = to_int64(memstats.other_sys)


def collect_gc_stats(fields: Fields, memstats: MemoryStats) -> None:
    fields.gc_sys = to_int64(memstats.gc_sys)
    fields.next_gc = to_int64(memstats.next_gc)
    fields.last_gc = to_int64(memstats.last_gc)
    fields.pause_total_ns = to_int64(memstats.pause_total_ns)
    fields.pause_ns = to_int64(memstats.pause_ns[last_pause_index(memstats.num_gc)])
    fields.num_gc = to_int64(memstats.num_gc)
    fields.gc_cpu_fraction = float(memstats.gc_cpu_fraction)


def flatten(snapshot: RuntimeSnapshot) -> MeasurementRecord:
    fields = Fields(
        serial=snapshot.serial,
        num_cpu=to_int64(snapshot.cpu_num),
        num_goroutine=to_int64(snapshot.goroutine_num),
        num_thread=to_int64(snapshot.thread_num),
        cpu_percent=to_int64(snapshot.cpu_percent),
        mem_percent=to_int64(snapshot.mem_percent),
    )
    collect_mem_stats(fields, snapshot.memstats)
    collect_gc_stats(fields, snapshot.memstats)
    return MeasurementRecord(fields=fields.values(), tags=fields.tags())
