import time
from datetime import datetime, timezone

STARTED_AT = time.monotonic()


def uptime_seconds() -> float:
    return time.monotonic() - STARTED_AT


def utc_timestamp() -> str:
    # ISO-8601 con milisegundos y sufijo Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
