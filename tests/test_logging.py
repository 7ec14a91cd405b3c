from __future__ import annotations

import json
import logging

from goruntime.logging import JsonFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("goruntime.collector", logging.WARNING, __file__, 1, "gather failed %s", ("x",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_one_object() -> None:
    payload = json.loads(JsonFormatter().format(_record(url="http://a.test", kind="status")))
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "goruntime.collector"
    assert payload["message"] == "gather failed x"
    assert payload["url"] == "http://a.test"
    assert payload["kind"] == "status"


def test_json_formatter_redacts_credentials() -> None:
    payload = json.loads(JsonFormatter().format(_record(password="pa$$word", authorization="Basic abc")))
    assert payload["password"] == "[REDACTED]"
    assert payload["authorization"] == "[REDACTED]"
