from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class LatestReading:
    station: str
    device_id: str
    metric: str
    value: float
    timestamp: datetime


@dataclass(frozen=True)
class DeviceRecord:
    device_id: str
    station: str
    metrics: list[str] = field(default_factory=list)
    latest: list[LatestReading] = field(default_factory=list)
    has_alert: bool = False


@dataclass(frozen=True)
class StationRecord:
    name: str
    has_alert: bool = False
