from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel


def canonical_json_bytes(value: BaseModel | dict[str, Any]) -> bytes:
    if isinstance(value, BaseModel):
        payload: Any = value.model_dump(mode="json")
    else:
        payload = value
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True, allow_nan=False)
    return encoded.encode("utf-8")


def canonical_json_text(value: BaseModel | dict[str, Any]) -> str:
    return canonical_json_bytes(value).decode("utf-8")
