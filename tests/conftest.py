# tests/conftest.py

from __future__ import annotations

import os

# must be set before todo_api reads its settings
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from todo_api.database import Base, get_db, register_sqlite_functions  # noqa: E402
from todo_api.main import app  # noqa: E402


@pytest.fixture()
def session_factory():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps the single connection alive so every session
    sees the same in-memory tables.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    register_sqlite_functions(engine)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_task(client):
    def _make(**fields):
        payload = {"title": "Task"}
        payload.update(fields)
        response = client.post("/tasks", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["task"]

    return _make
