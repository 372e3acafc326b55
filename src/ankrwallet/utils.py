from __future__ import annotations

import base64
from datetime import datetime, timezone


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(value: str) -> bytes:
    return base64.b64decode(value.encode("ascii"), validate=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso8601(ts: datetime) -> str:
    """Filesystem-safe ISO 8601 timestamp: colons become dashes, nanosecond field."""
    ts = ts.astimezone(timezone.utc)
    return (
        f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"
        f"T{ts.hour:02d}-{ts.minute:02d}-{ts.second:02d}"
        f".{ts.microsecond * 1000:09d}Z"
    )


def keystore_filename(address: str, ts: datetime | None = None) -> str:
    return f"UTC--{to_iso8601(ts or utc_now())}--{address}"


def wipe(buffer: bytearray) -> None:
    """Overwrite a mutable secret buffer in place."""
    for i in range(len(buffer)):
        buffer[i] = 0
