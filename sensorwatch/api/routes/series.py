from __future__ import annotations

import csv
import io
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from fastapi.responses import Response

from sensorwatch.api.deps import get_series_service
from sensorwatch.models.series import GridPoint
from sensorwatch.schemas.measurements import DEVICE_ID_PATTERN
from sensorwatch.schemas.series import GridPointRead
from sensorwatch.services.series import SeriesService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/devices")

DeviceParam = Annotated[str, Path(min_length=1, max_length=64, pattern=DEVICE_ID_PATTERN)]
# Kept as plain strings: malformed values fall back to defaults instead of a 422.
MetricParam = Annotated[str | None, Query(max_length=64)]
InstantParam = Annotated[str | None, Query(max_length=64)]
IntervalParam = Annotated[str | None, Query(max_length=32)]


def _fetch(
    service: SeriesService,
    *,
    device_id: str,
    metric: str | None,
    start: str | None,
    end: str | None,
    interval_minutes: str | None,
) -> list[GridPoint]:
    window = service.resolve_window(start=start, stop=end, interval_minutes=interval_minutes)
    try:
        return service.fetch_series(device_id=device_id, metric=metric, window=window)
    except Exception as e:  # noqa: BLE001 - normalize storage failures
        logger.exception("Error fetching %s series for device %s", metric, device_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch data",
        ) from e


@router.get("/{device_id}/data", response_model=list[GridPointRead])
def device_series(
    device_id: DeviceParam,
    service: Annotated[SeriesService, Depends(get_series_service)],
    metric: MetricParam = None,
    start: InstantParam = None,
    end: InstantParam = None,
    interval_minutes: IntervalParam = None,
) -> list[GridPointRead]:
    points = _fetch(
        service,
        device_id=device_id,
        metric=metric,
        start=start,
        end=end,
        interval_minutes=interval_minutes,
    )
    return [GridPointRead.from_point(p) for p in points]


@router.get("/{device_id}/export")
def export_device_series(
    device_id: DeviceParam,
    service: Annotated[SeriesService, Depends(get_series_service)],
    metric: MetricParam = None,
    start: InstantParam = None,
    end: InstantParam = None,
    interval_minutes: IntervalParam = None,
) -> Response:
    points = _fetch(
        service,
        device_id=device_id,
        metric=metric,
        start=start,
        end=end,
        interval_minutes=interval_minutes,
    )

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["timestamp", "value"])
    for point in points:
        row = GridPointRead.from_point(point)
        writer.writerow(
            [
                row.timestamp.isoformat().replace("+00:00", "Z"),
                "" if row.value is None else repr(row.value),
            ]
        )

    filename = f"{device_id}.csv"
    return Response(
        content=buf.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
