from __future__ import annotations

from datetime import datetime

from sensorwatch.core.clock import to_utc


def to_rfc3339(dt: datetime) -> str:
    return to_utc(dt).isoformat().replace("+00:00", "Z")


def flux_str(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def flux_range(start: datetime, stop: datetime) -> str:
    return (
        f"range(start: time(v: {flux_str(to_rfc3339(start))}), "
        f"stop: time(v: {flux_str(to_rfc3339(stop))}))"
    )
