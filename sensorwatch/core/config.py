from __future__ import annotations

import re

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sensorwatch.schemas.measurements import DEVICE_ID_PATTERN, STATION_PATTERN

DEFAULT_ADMIN_PASSWORD_HASH = (
    "$2b$12$sdOU8uwfeIt/6CaZUIM6ke71zg30wHn0r3QC4TDA3xHYwQxTVEEXi"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    secret_key: str = Field(min_length=32)
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=30, ge=1, le=60 * 24 * 30)

    admin_username: str = Field(default="admin", min_length=3, max_length=64)
    admin_password_hash: str = Field(default=DEFAULT_ADMIN_PASSWORD_HASH, min_length=10)

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    influx_url: AnyHttpUrl = Field(default="http://influxdb:8086")
    influx_token: str = Field(min_length=10)
    influx_org: str = Field(min_length=1)
    influx_bucket: str = Field(min_length=1)
    influx_measurement: str = Field(default="sensor_readings")
    influx_timeout_ms: int = Field(default=10_000, ge=1000, le=120_000)

    catalog_lookback_days: int = Field(default=365, ge=1, le=3650)
    alert_window_minutes: int = Field(default=10, ge=1, le=60 * 24)

    generator_enabled: bool = Field(default=True)
    generator_interval_seconds: float = Field(default=60.0, ge=1.0, le=3600.0)
    generator_targets: list[str] = Field(
        default_factory=lambda: ["station-1/pump-a", "station-1/motor-b"]
    )

    @field_validator("generator_targets")
    @classmethod
    def _validate_targets(cls, v: list[str]) -> list[str]:
        for target in v:
            station, sep, device_id = target.partition("/")
            if (
                not sep
                or not re.match(STATION_PATTERN, station)
                or not re.match(DEVICE_ID_PATTERN, device_id)
            ):
                raise ValueError(f"Invalid generator target '{target}' (expected 'station/device_id').")
        return v

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    return settings
