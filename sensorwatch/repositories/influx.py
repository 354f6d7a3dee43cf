from __future__ import annotations

from datetime import datetime, timedelta

from influxdb_client import InfluxDBClient, Point, WritePrecision
from influxdb_client.client.write_api import SYNCHRONOUS

from sensorwatch.core.clock import to_millis, to_utc
from sensorwatch.core.config import Settings
from sensorwatch.models.measurement import LatestReading
from sensorwatch.models.series import RawSample
from sensorwatch.repositories.flux import flux_range, flux_str

# Flux ranges exclude their stop bound; sample windows are inclusive.
_INCLUSIVE_STOP = timedelta(milliseconds=1)


class InfluxMeasurementRepository:
    def __init__(
        self,
        *,
        client: InfluxDBClient,
        org: str,
        bucket: str,
        measurement: str,
        timeout_ms: int,
    ) -> None:
        self._client = client
        self._org = org
        self._bucket = bucket
        self._measurement = measurement
        self._timeout_ms = timeout_ms

    def ping(self) -> None:
        if not self._client.ping():
            raise ConnectionError("InfluxDB ping failed")

    def write_measurement(
        self,
        *,
        station: str,
        device_id: str,
        readings: dict[str, float],
        timestamp: datetime,
    ) -> None:
        point = (
            Point(self._measurement)
            .tag("station", station)
            .tag("device_id", device_id)
        )
        for metric, value in readings.items():
            point = point.field(metric, float(value))
        point = point.time(to_utc(timestamp), WritePrecision.NS)

        write_api = self._client.write_api(write_options=SYNCHRONOUS)
        write_api.write(bucket=self._bucket, org=self._org, record=point)

    def query_samples(
        self,
        *,
        device_id: str,
        metric: str,
        start: datetime,
        stop: datetime,
    ) -> list[RawSample]:
        query = f"""
from(bucket: {flux_str(self._bucket)})
  |> {flux_range(start, stop + _INCLUSIVE_STOP)}
  |> filter(fn: (r) => r["_measurement"] == {flux_str(self._measurement)})
  |> filter(fn: (r) => r["device_id"] == {flux_str(device_id)})
  |> filter(fn: (r) => r["_field"] == {flux_str(metric)})
  |> group()
  |> keep(columns: ["_time", "_value"])
  |> sort(columns: ["_time"])
"""
        query_api = self._client.query_api()
        tables = query_api.query(query=query, org=self._org)

        results: list[RawSample] = []
        for table in tables:
            for record in table.records:
                ts = record.get_time()
                value = record.get_value()
                if ts is None or value is None:
                    continue
                results.append(RawSample(timestamp_ms=to_millis(ts), value=float(value)))
        return results

    def query_latest(
        self,
        *,
        start: datetime,
        stop: datetime,
        station: str | None = None,
        device_id: str | None = None,
    ) -> list[LatestReading]:
        filters = [f'r["_measurement"] == {flux_str(self._measurement)}']
        if station is not None:
            filters.append(f'r["station"] == {flux_str(station)}')
        if device_id is not None:
            filters.append(f'r["device_id"] == {flux_str(device_id)}')
        predicate = " and ".join(filters)

        query = f"""
from(bucket: {flux_str(self._bucket)})
  |> {flux_range(start, stop + _INCLUSIVE_STOP)}
  |> filter(fn: (r) => {predicate})
  |> group(columns: ["station", "device_id", "_field"])
  |> last()
  |> keep(columns: ["_time", "_value", "_field", "station", "device_id"])
"""
        query_api = self._client.query_api()
        tables = query_api.query(query=query, org=self._org)

        results: list[LatestReading] = []
        for table in tables:
            for record in table.records:
                ts = record.get_time()
                value = record.get_value()
                station_tag = record.values.get("station")
                device_tag = record.values.get("device_id")
                if ts is None or not isinstance(station_tag, str) or not isinstance(device_tag, str):
                    continue
                if not isinstance(value, (int, float)):
                    continue
                results.append(
                    LatestReading(
                        station=station_tag,
                        device_id=device_tag,
                        metric=record.get_field(),
                        value=float(value),
                        timestamp=ts,
                    )
                )
        results.sort(key=lambda r: (r.station, r.device_id, r.metric))
        return results


def create_influx_client(settings: Settings) -> InfluxDBClient:
    return InfluxDBClient(
        url=str(settings.influx_url),
        token=settings.influx_token,
        org=settings.influx_org,
        timeout=settings.influx_timeout_ms,
    )
