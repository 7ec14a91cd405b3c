from __future__ import annotations

DEFAULT_MEASUREMENT = "goruntime_m"
DEFAULT_METHOD = "GET"
DEFAULT_URL = "http://localhost:8062/debug/vars"
DEFAULT_TIMEOUT_SECONDS = 5.0

# Size of the runtime's circular GC pause history.
PAUSE_HISTORY_LEN = 256

HTTP_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})
