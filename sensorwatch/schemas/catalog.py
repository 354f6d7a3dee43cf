from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class StationRead(BaseModel):
    name: str
    has_alert: bool = False


class DeviceRead(BaseModel):
    id: str
    name: str
    location: str
    metrics: list[str] = Field(default_factory=list)
    has_alert: bool = False


class LatestReadingRead(BaseModel):
    metric: str
    unit: str | None = None
    value: float
    timestamp: datetime
    out_of_range: bool = False


class DeviceDetail(BaseModel):
    id: str
    name: str
    location: str
    metrics: list[str] = Field(default_factory=list)
    latest: list[LatestReadingRead] = Field(default_factory=list)
    has_alert: bool = False
