from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from shared.enums import ErrorKind
from shared.schemas import ErrorReport, MemoryStats, RuntimeSnapshot
from tests.conftest import runtime_payload


def test_short_pause_history_is_zero_filled() -> None:
    stats = MemoryStats.model_validate({"PauseNs": [5, 6, 7]})
    assert len(stats.pause_ns) == 256
    assert stats.pause_ns[:4] == (5, 6, 7, 0)
    assert stats.pause_ns[255] == 0


def test_long_pause_history_is_truncated() -> None:
    stats = MemoryStats.model_validate({"PauseNs": list(range(300))})
    assert len(stats.pause_ns) == 256
    assert stats.pause_ns[255] == 255


def test_unknown_runtime_keys_are_ignored() -> None:
    payload = runtime_payload()
    payload["memstats"]["BySize"] = [{"Size": 8, "Mallocs": 1, "Frees": 0}]
    payload["memstats"]["EnableGC"] = True
    payload["goVersion"] = "go1.22"
    snapshot = RuntimeSnapshot.model_validate_json(json.dumps(payload))
    assert snapshot.memstats.heap_objects == 180


def test_null_values_decode_to_zero() -> None:
    snapshot = RuntimeSnapshot.model_validate_json('{"serial": "a", "cpuNum": null, "memstats": {"Alloc": null}}')
    assert snapshot.cpu_num == 0
    assert snapshot.memstats.alloc == 0


def test_negative_counter_is_rejected() -> None:
    with pytest.raises(ValidationError):
        RuntimeSnapshot.model_validate_json('{"memstats": {"HeapAlloc": -1}}')


def test_string_number_is_rejected() -> None:
    with pytest.raises(ValidationError):
        RuntimeSnapshot.model_validate_json('{"cpuNum": "8"}')


def test_non_object_body_is_rejected() -> None:
    with pytest.raises(ValidationError):
        RuntimeSnapshot.model_validate_json("[1, 2, 3]")


def test_snapshot_is_immutable() -> None:
    snapshot = RuntimeSnapshot.model_validate(runtime_payload())
    with pytest.raises(ValidationError):
        snapshot.serial = "other"  # type: ignore[misc]


def test_error_report_renders_url_prefix() -> None:
    report = ErrorReport(url="http://a.test/vars", kind=ErrorKind.STATUS, detail="boom")
    assert str(report) == "[url=http://a.test/vars]: boom"


def test_counter_accepts_uint64_max_and_rejects_overflow() -> None:
    stats = MemoryStats.model_validate_json('{"Alloc": 18446744073709551615}')
    assert stats.alloc == (1 << 64) - 1
    with pytest.raises(ValidationError):
        MemoryStats.model_validate_json('{"Alloc": 18446744073709551616}')
    with pytest.raises(ValidationError):
        MemoryStats.model_validate_json('{"PauseNs": [18446744073709551616]}')


@pytest.mark.parametrize("value", [1 << 63, -(1 << 63) - 1])
def test_signed_field_rejects_int64_overflow(value: int) -> None:
    with pytest.raises(ValidationError):
        RuntimeSnapshot.model_validate_json(json.dumps({"cpuNum": value}))


def test_signed_field_accepts_int64_bounds() -> None:
    snapshot = RuntimeSnapshot.model_validate_json(json.dumps({"cpuNum": (1 << 63) - 1, "threadNum": -(1 << 63)}))
    assert snapshot.cpu_num == (1 << 63) - 1
    assert snapshot.thread_num == -(1 << 63)


def test_null_body_decodes_to_zero_snapshot() -> None:
    snapshot = RuntimeSnapshot.model_validate_json("null")
    assert snapshot == RuntimeSnapshot()
    assert snapshot.memstats.pause_ns == (0,) * 256


def test_integer_cpu_fraction_decodes_as_float() -> None:
    stats = MemoryStats.model_validate_json('{"GCCPUFraction": 0}')
    assert stats.gc_cpu_fraction == 0.0
    assert isinstance(stats.gc_cpu_fraction, float)
