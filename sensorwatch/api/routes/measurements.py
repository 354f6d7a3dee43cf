from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from sensorwatch.api.deps import WriteUser, get_clock, get_measurement_repository
from sensorwatch.core.clock import Clock
from sensorwatch.repositories.base import MeasurementRepository
from sensorwatch.schemas.measurements import MeasurementCreate, MeasurementWriteResponse
from sensorwatch.services.measurements import MeasurementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/measurements")


def get_service(
    repo: Annotated[MeasurementRepository, Depends(get_measurement_repository)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> MeasurementService:
    return MeasurementService(repo, clock=clock)


@router.post(
    "",
    response_model=MeasurementWriteResponse,
    status_code=status.HTTP_201_CREATED,
)
def write_measurement(
    _: WriteUser,
    payload: MeasurementCreate,
    service: Annotated[MeasurementService, Depends(get_service)],
) -> MeasurementWriteResponse:
    try:
        written_at = service.write_measurement(payload)
    except Exception as e:  # noqa: BLE001 - normalize storage failures
        logger.exception("Error writing measurement for %s/%s", payload.station, payload.device_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to write measurement",
        ) from e
    return MeasurementWriteResponse(written_at=written_at)


@router.get("/health", tags=["meta"])
def health(
    repo: Annotated[MeasurementRepository, Depends(get_measurement_repository)],
) -> dict[str, str]:
    try:
        repo.ping()
    except Exception as e:  # noqa: BLE001 - expose as 503 without leaking internals
        logger.warning("Measurement store health check failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="InfluxDB unavailable",
        ) from e
    return {"status": "ok"}
