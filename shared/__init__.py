"""Wire schemas shared by the collector and its sinks."""

from shared.enums import ErrorKind
from shared.schemas import ErrorReport, Measurement, MeasurementRecord, MemoryStats, RuntimeSnapshot

__all__ = [
    "RuntimeSnapshot",
    "MemoryStats",
    "MeasurementRecord",
    "Measurement",
    "ErrorReport",
    "ErrorKind",
]
