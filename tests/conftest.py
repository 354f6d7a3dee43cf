from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from sensorwatch.api import deps
from sensorwatch.core.config import Settings
from sensorwatch.core.security import get_password_hash
from sensorwatch.factory import create_app
from tests.fakes import FakeMeasurementRepository


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        secret_key="test_secret_key_must_be_32_chars_minimum",
        admin_username="admin",
        admin_password_hash=get_password_hash("password"),
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        influx_url="http://example.com:8086",
        influx_token="test-token-1234567890",
        influx_org="test",
        influx_bucket="test",
        influx_measurement="sensor_readings",
        influx_timeout_ms=5000,
        generator_enabled=False,
    )


@pytest.fixture()
def repo() -> FakeMeasurementRepository:
    return FakeMeasurementRepository()


@pytest.fixture()
def client(settings: Settings, repo: FakeMeasurementRepository) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_measurement_repository] = lambda: repo
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def token(client: TestClient) -> str:
    resp = client.post(
        "/api/v1/auth/token",
        data={"username": "admin", "password": "password"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]

