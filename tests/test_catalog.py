from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sensorwatch.models.measurement import LatestReading
from sensorwatch.services.catalog import CatalogService, is_alerting
from tests.fakes import FakeMeasurementRepository

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
WINDOW = timedelta(minutes=10)


def _reading(metric: str, value: float, age: timedelta = timedelta()) -> LatestReading:
    return LatestReading(
        station="station-1", device_id="pump-a", metric=metric, value=value, timestamp=NOW - age
    )


def test_is_alerting_thresholds() -> None:
    assert is_alerting(_reading("temperature", 31.0), now=NOW, alert_window=WINDOW)
    assert is_alerting(_reading("voltage", 205.0), now=NOW, alert_window=WINDOW)
    assert not is_alerting(_reading("temperature", 25.0), now=NOW, alert_window=WINDOW)
    assert not is_alerting(_reading("pressure", 1e9), now=NOW, alert_window=WINDOW)


def test_stale_reading_does_not_alert() -> None:
    stale = _reading("temperature", 99.0, age=timedelta(minutes=30))
    assert not is_alerting(stale, now=NOW, alert_window=WINDOW)


def test_catalog_groups_devices_and_stations(repo: FakeMeasurementRepository) -> None:
    repo.write_measurement(
        station="station-1",
        device_id="pump-a",
        readings={"temperature": 22.0, "voltage": 220.0},
        timestamp=NOW - timedelta(minutes=1),
    )
    repo.write_measurement(
        station="station-1",
        device_id="motor-b",
        readings={"current": 12.0},
        timestamp=NOW - timedelta(minutes=1),
    )
    repo.write_measurement(
        station="station-2",
        device_id="fan-c",
        readings={"temperature": 20.0},
        timestamp=NOW - timedelta(minutes=1),
    )
    service = CatalogService(repo, clock=lambda: NOW, alert_window=WINDOW)

    stations = service.list_stations()
    assert [(s.name, s.has_alert) for s in stations] == [
        ("station-1", True),
        ("station-2", False),
    ]

    devices = service.list_devices("station-1")
    assert [(d.device_id, d.has_alert) for d in devices] == [("motor-b", True), ("pump-a", False)]
    assert devices[1].metrics == ["temperature", "voltage"]

    assert service.list_devices("station-9") == []


def test_get_device_uses_latest_reading(repo: FakeMeasurementRepository) -> None:
    for minutes, value in [(5, 40.0), (1, 21.0)]:
        repo.write_measurement(
            station="station-1",
            device_id="pump-a",
            readings={"temperature": value},
            timestamp=NOW - timedelta(minutes=minutes),
        )
    service = CatalogService(repo, clock=lambda: NOW, alert_window=WINDOW)

    device = service.get_device("pump-a")
    assert device is not None
    assert device.station == "station-1"
    assert [r.value for r in device.latest] == [21.0]
    assert not device.has_alert
    assert service.get_device("missing") is None


def test_readings_outside_lookback_are_ignored(repo: FakeMeasurementRepository) -> None:
    repo.write_measurement(
        station="station-1",
        device_id="pump-a",
        readings={"temperature": 20.0},
        timestamp=NOW - timedelta(days=400),
    )
    service = CatalogService(repo, clock=lambda: NOW)
    assert service.list_stations() == []
