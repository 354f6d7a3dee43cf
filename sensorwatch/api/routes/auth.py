from __future__ import annotations

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from sensorwatch.api.deps import CurrentUser, authenticate_user, get_settings
from sensorwatch.core.config import Settings
from sensorwatch.core.security import create_access_token
from sensorwatch.schemas.auth import Token, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/token", response_model=Token)
def issue_token(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Token:
    user = authenticate_user(
        username=form_data.username, password=form_data.password, settings=settings
    )
    if not user:
        logger.warning("Rejected token request for user %r", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    lifetime = timedelta(minutes=settings.access_token_expire_minutes)
    token = create_access_token(
        subject=user.username, scopes=user.scopes, settings=settings, expires_delta=lifetime
    )

    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return Token(access_token=token, expires_in=int(lifetime.total_seconds()))


@router.get("/me", response_model=User)
def whoami(user: CurrentUser) -> User:
    return user
