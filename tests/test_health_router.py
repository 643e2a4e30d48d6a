from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from todo_api.database import get_db
from todo_api.main import app


class DownSession:
    def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    def close(self):
        pass


@pytest.fixture()
def db_down(client):
    app.dependency_overrides[get_db] = lambda: DownSession()
    return client


def test_health_reports_connected(client):
    response = client.get("/health")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "healthy"
    assert body["services"] == {"database": "connected", "api": "running"}
    assert body["environment"] == "test"
    assert body["uptime"] >= 0
    assert body["memory"]["unit"] == "MB"
    assert body["memory"]["used"] > 0
    assert body["memory"]["total"] >= body["memory"]["used"]


def test_ready_and_live(client):
    assert client.get("/health/ready").json()["status"] == "ready"

    live = client.get("/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "alive"


def test_health_when_database_is_down(db_down):
    response = db_down.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
    assert response.json()["services"]["database"] == "disconnected"


def test_ready_when_database_is_down(db_down):
    response = db_down.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {
        "status": "not ready",
        "timestamp": response.json()["timestamp"],
        "reason": "Database connection failed",
    }


def test_live_ignores_database(db_down):
    assert db_down.get("/health/live").status_code == 200


def test_responses_carry_security_headers(client):
    response = client.get("/health/live")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "SAMEORIGIN"
