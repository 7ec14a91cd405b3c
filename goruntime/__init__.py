"""Poll runtime statistics endpoints and flatten them into gauge measurements."""

from goruntime.accumulator import Accumulator, MemoryAccumulator
from goruntime.collector import GoRuntimeCollector
from goruntime.config import CollectorConfig, EndpointConfig
from goruntime.metric import flatten

__all__ = [
    "Accumulator",
    "MemoryAccumulator",
    "GoRuntimeCollector",
    "CollectorConfig",
    "EndpointConfig",
    "flatten",
]
