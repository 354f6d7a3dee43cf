from __future__ import annotations

from datetime import timedelta
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import OAuth2PasswordBearer, SecurityScopes

from sensorwatch.core.clock import Clock, utc_now
from sensorwatch.core.config import Settings
from sensorwatch.core.security import (
    ALL_SCOPES,
    WRITE_SCOPE,
    decode_access_token,
    verify_password,
)
from sensorwatch.repositories.base import MeasurementRepository
from sensorwatch.repositories.influx import InfluxMeasurementRepository
from sensorwatch.schemas.auth import User
from sensorwatch.services.catalog import CatalogService
from sensorwatch.services.series import SeriesService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", scopes=ALL_SCOPES)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_clock(request: Request) -> Clock:
    return getattr(request.app.state, "clock", utc_now)


def get_measurement_repository(
    request: Request, settings: Annotated[Settings, Depends(get_settings)]
) -> MeasurementRepository:
    return InfluxMeasurementRepository(
        client=request.app.state.influx_client,
        org=settings.influx_org,
        bucket=settings.influx_bucket,
        measurement=settings.influx_measurement,
        timeout_ms=settings.influx_timeout_ms,
    )


def get_catalog_service(
    repo: Annotated[MeasurementRepository, Depends(get_measurement_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> CatalogService:
    return CatalogService(
        repo,
        clock=clock,
        lookback=timedelta(days=settings.catalog_lookback_days),
        alert_window=timedelta(minutes=settings.alert_window_minutes),
    )


def get_series_service(
    repo: Annotated[MeasurementRepository, Depends(get_measurement_repository)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> SeriesService:
    return SeriesService(repo, clock=clock)


def authenticate_user(*, username: str, password: str, settings: Settings) -> User | None:
    if username != settings.admin_username:
        return None
    if not verify_password(password, settings.admin_password_hash):
        return None
    return User(username=username, scopes=list(ALL_SCOPES))


def get_current_user(
    security_scopes: SecurityScopes,
    token: Annotated[str, Depends(oauth2_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    authenticate_value = "Bearer"
    if security_scopes.scopes:
        authenticate_value = f'Bearer scope="{security_scopes.scope_str}"'

    try:
        subject, token_scopes = decode_access_token(token, settings=settings)
    except jwt.PyJWTError as e:  # noqa: BLE001 - normalize to 401
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": authenticate_value},
        ) from e

    user = User(username=subject, scopes=token_scopes)
    for scope in security_scopes.scopes:
        if scope not in user.scopes:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
                headers={"WWW-Authenticate": authenticate_value},
            )
    return user


CurrentUser = Annotated[User, Security(get_current_user)]

WriteUser = Annotated[User, Security(get_current_user, scopes=[WRITE_SCOPE])]
