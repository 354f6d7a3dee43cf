from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status

from sensorwatch.api.deps import get_catalog_service
from sensorwatch.core.metrics import resolve_metric
from sensorwatch.models.measurement import DeviceRecord
from sensorwatch.schemas.catalog import DeviceDetail, DeviceRead, LatestReadingRead, StationRead
from sensorwatch.schemas.measurements import DEVICE_ID_PATTERN, STATION_PATTERN
from sensorwatch.services.catalog import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter()

StationParam = Annotated[str, Path(min_length=1, max_length=64, pattern=STATION_PATTERN)]
DeviceParam = Annotated[str, Path(min_length=1, max_length=64, pattern=DEVICE_ID_PATTERN)]


def _device_read(device: DeviceRecord) -> DeviceRead:
    return DeviceRead(
        id=device.device_id,
        name=device.device_id,
        location=device.station,
        metrics=device.metrics,
        has_alert=device.has_alert,
    )


def _storage_error(what: str) -> HTTPException:
    logger.exception("Error fetching %s", what)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to fetch {what}",
    )


@router.get("/stations", response_model=list[StationRead])
def list_stations(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> list[StationRead]:
    try:
        stations = service.list_stations()
    except Exception as e:  # noqa: BLE001 - normalize storage failures
        raise _storage_error("stations") from e
    return [StationRead(name=s.name, has_alert=s.has_alert) for s in stations]


@router.get("/stations/{station}/devices", response_model=list[DeviceRead])
def list_station_devices(
    station: StationParam,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> list[DeviceRead]:
    try:
        devices = service.list_devices(station)
    except Exception as e:  # noqa: BLE001 - normalize storage failures
        raise _storage_error("devices") from e
    return [_device_read(d) for d in devices]


@router.get("/devices/{device_id}", response_model=DeviceDetail)
def get_device(
    device_id: DeviceParam,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> DeviceDetail:
    try:
        device = service.get_device(device_id)
    except Exception as e:  # noqa: BLE001 - normalize storage failures
        raise _storage_error("device") from e
    if device is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")

    latest: list[LatestReadingRead] = []
    for reading in device.latest:
        spec = resolve_metric(reading.metric)
        latest.append(
            LatestReadingRead(
                metric=reading.metric,
                unit=spec.unit if spec else None,
                value=reading.value,
                timestamp=reading.timestamp,
                out_of_range=spec.is_out_of_range(reading.value) if spec else False,
            )
        )
    return DeviceDetail(
        id=device.device_id,
        name=device.device_id,
        location=device.station,
        metrics=device.metrics,
        latest=latest,
        has_alert=device.has_alert,
    )
