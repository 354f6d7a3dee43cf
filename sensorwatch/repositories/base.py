from __future__ import annotations

from datetime import datetime
from typing import Protocol

from sensorwatch.models.measurement import LatestReading
from sensorwatch.models.series import RawSample


class MeasurementRepository(Protocol):
    def ping(self) -> None: ...

    def write_measurement(
        self,
        *,
        station: str,
        device_id: str,
        readings: dict[str, float],
        timestamp: datetime,
    ) -> None: ...

    def query_samples(
        self,
        *,
        device_id: str,
        metric: str,
        start: datetime,
        stop: datetime,
    ) -> list[RawSample]: ...

    def query_latest(
        self,
        *,
        start: datetime,
        stop: datetime,
        station: str | None = None,
        device_id: str | None = None,
    ) -> list[LatestReading]: ...
