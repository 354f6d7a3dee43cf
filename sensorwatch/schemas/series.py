from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from sensorwatch.core.clock import from_millis
from sensorwatch.models.series import GridPoint


class GridPointRead(BaseModel):
    timestamp: datetime
    value: float | None = None

    @classmethod
    def from_point(cls, point: GridPoint) -> GridPointRead:
        return cls(timestamp=from_millis(point.timestamp_ms), value=point.value)
