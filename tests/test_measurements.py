from __future__ import annotations

from fastapi.testclient import TestClient

from tests.fakes import FakeMeasurementRepository


def test_write_measurement(client: TestClient, token: str, repo: FakeMeasurementRepository) -> None:
    resp = client.post(
        "/api/v1/measurements",
        json={
            "station": "station-1",
            "device_id": "pump-a",
            "timestamp": "2024-01-01T00:00:00Z",
            "readings": {"temperature": 21.5, "voltage": 220.0},
        },
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["written_at"].startswith("2024-01-01T00:00:00")

    assert len(repo._rows) == 2


def test_write_requires_auth(client: TestClient) -> None:
    resp = client.post(
        "/api/v1/measurements",
        json={"station": "station-1", "device_id": "pump-a", "readings": {"temperature": 21.5}},
    )
    assert resp.status_code in {401, 403}


def test_write_rejects_invalid_payload(client: TestClient, token: str) -> None:
    resp = client.post(
        "/api/v1/measurements",
        json={"station": "station-1", "device_id": "pump a!", "readings": {}},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 422


def test_write_storage_failure_is_500(
    client: TestClient, token: str, repo: FakeMeasurementRepository
) -> None:
    repo.fail = True
    resp = client.post(
        "/api/v1/measurements",
        json={"station": "station-1", "device_id": "pump-a", "readings": {"temperature": 1.0}},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 500


def test_health(client: TestClient, repo: FakeMeasurementRepository) -> None:
    assert client.get("/api/v1/measurements/health").json() == {"status": "ok"}
    repo.fail = True
    assert client.get("/api/v1/measurements/health").status_code == 503
