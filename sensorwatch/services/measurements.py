from __future__ import annotations

from datetime import datetime

from sensorwatch.core.clock import Clock, utc_now
from sensorwatch.repositories.base import MeasurementRepository
from sensorwatch.schemas.measurements import MeasurementCreate


class MeasurementService:
    def __init__(self, repo: MeasurementRepository, *, clock: Clock = utc_now) -> None:
        self._repo = repo
        self._clock = clock

    def write_measurement(self, payload: MeasurementCreate) -> datetime:
        timestamp = payload.timestamp or self._clock()
        self._repo.write_measurement(
            station=payload.station,
            device_id=payload.device_id,
            readings=payload.readings,
            timestamp=timestamp,
        )
        return timestamp
