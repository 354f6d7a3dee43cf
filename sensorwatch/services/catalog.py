from __future__ import annotations

from datetime import datetime, timedelta

from sensorwatch.core.clock import Clock, utc_now
from sensorwatch.core.metrics import resolve_metric
from sensorwatch.models.measurement import DeviceRecord, LatestReading, StationRecord
from sensorwatch.repositories.base import MeasurementRepository


def is_alerting(reading: LatestReading, *, now: datetime, alert_window: timedelta) -> bool:
    spec = resolve_metric(reading.metric)
    if spec is None:
        return False
    if now - reading.timestamp > alert_window:
        return False
    return spec.is_out_of_range(reading.value)


class CatalogService:
    """Stations and devices as seen through the tags of stored readings."""

    def __init__(
        self,
        repo: MeasurementRepository,
        *,
        clock: Clock = utc_now,
        lookback: timedelta = timedelta(days=365),
        alert_window: timedelta = timedelta(minutes=10),
    ) -> None:
        self._repo = repo
        self._clock = clock
        self._lookback = lookback
        self._alert_window = alert_window

    def list_stations(self) -> list[StationRecord]:
        alerts: dict[str, bool] = {}
        for device in self._devices():
            alerts[device.station] = alerts.get(device.station, False) or device.has_alert
        return [StationRecord(name=name, has_alert=alerts[name]) for name in sorted(alerts)]

    def list_devices(self, station: str) -> list[DeviceRecord]:
        return self._devices(station=station)

    def get_device(self, device_id: str) -> DeviceRecord | None:
        devices = self._devices(device_id=device_id)
        if not devices:
            return None
        return devices[0]

    def _devices(
        self, *, station: str | None = None, device_id: str | None = None
    ) -> list[DeviceRecord]:
        now = self._clock()
        readings = self._repo.query_latest(
            start=now - self._lookback, stop=now, station=station, device_id=device_id
        )

        grouped: dict[tuple[str, str], list[LatestReading]] = {}
        for reading in readings:
            grouped.setdefault((reading.station, reading.device_id), []).append(reading)

        devices: list[DeviceRecord] = []
        for (station_name, dev_id), latest in sorted(grouped.items()):
            latest.sort(key=lambda r: r.metric)
            devices.append(
                DeviceRecord(
                    device_id=dev_id,
                    station=station_name,
                    metrics=[r.metric for r in latest],
                    latest=latest,
                    has_alert=any(
                        is_alerting(r, now=now, alert_window=self._alert_window) for r in latest
                    ),
                )
            )
        return devices
