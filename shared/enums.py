from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    STATUS = "status"
    DECODE = "decode"
    INTERNAL = "internal"
