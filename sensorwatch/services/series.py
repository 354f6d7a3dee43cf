from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from sensorwatch.core.clock import Clock, from_millis, to_millis, to_utc, utc_now
from sensorwatch.core.metrics import resolve_metric
from sensorwatch.models.series import GridPoint, TimeRange
from sensorwatch.repositories.base import MeasurementRepository
from sensorwatch.services.resampling import clamp_interval, clamp_range, resample

DEFAULT_WINDOW = timedelta(hours=24)
DEFAULT_INTERVAL_MINUTES = 1.0


@dataclass(frozen=True)
class SeriesWindow:
    time_range: TimeRange
    interval_ms: int

    @property
    def start(self) -> datetime:
        return from_millis(self.time_range.start_ms)

    @property
    def stop(self) -> datetime:
        return from_millis(self.time_range.end_ms)


def parse_instant(raw: str | None) -> datetime | None:
    if raw is None or not raw.strip():
        return None
    try:
        return to_utc(datetime.fromisoformat(raw.strip().replace("Z", "+00:00")))
    except (ValueError, OverflowError):
        # Unparseable, or out of datetime range once shifted to UTC.
        return None


def parse_interval_minutes(raw: str | None) -> float:
    if raw is None:
        return DEFAULT_INTERVAL_MINUTES
    try:
        minutes = float(raw)
    except ValueError:
        return DEFAULT_INTERVAL_MINUTES
    if not math.isfinite(minutes * 60_000):
        return DEFAULT_INTERVAL_MINUTES
    return minutes


class SeriesService:
    def __init__(self, repo: MeasurementRepository, *, clock: Clock = utc_now) -> None:
        self._repo = repo
        self._clock = clock

    def resolve_window(
        self,
        *,
        start: str | None = None,
        stop: str | None = None,
        interval_minutes: str | None = None,
    ) -> SeriesWindow:
        now = self._clock()
        start_dt = parse_instant(start) or now - DEFAULT_WINDOW
        stop_dt = parse_instant(stop) or now
        if start_dt > stop_dt:
            start_dt, stop_dt = stop_dt, start_dt

        # Capped here as well as in resample() so the store query covers the grid exactly.
        time_range = clamp_range(TimeRange(start_ms=to_millis(start_dt), end_ms=to_millis(stop_dt)))
        interval_ms = clamp_interval(round(parse_interval_minutes(interval_minutes) * 60_000))
        return SeriesWindow(time_range=time_range, interval_ms=interval_ms)

    def fetch_series(self, *, device_id: str, metric: str | None, window: SeriesWindow) -> list[GridPoint]:
        spec = resolve_metric(metric)
        if spec is None:
            return []
        samples = self._repo.query_samples(
            device_id=device_id, metric=spec.name, start=window.start, stop=window.stop
        )
        return resample(window.time_range, window.interval_ms, samples)
