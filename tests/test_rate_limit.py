from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from todo_api.middleware.error_handler import register_error_handlers
from todo_api.middleware.rate_limit import install_rate_limiting, make_limiter


def limited_app(limit: str, enabled: bool = True) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)
    install_rate_limiting(app, make_limiter(limit, enabled=enabled))

    @app.get("/ping")
    def ping():
        return {"ok": True}

    return app


def test_requests_over_the_limit_get_429():
    client = TestClient(limited_app("2 per minute"))

    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200
    response = client.get("/ping")

    body = response.json()
    assert response.status_code == 429
    assert body["statusCode"] == 429
    assert body["error"] == "Too many requests from this IP, please try again later."
    assert body["path"] == "/ping"
    assert body["method"] == "GET"
    assert body["details"]
    assert response.headers["x-ratelimit-limit"] == "2"


def test_successful_responses_carry_limit_headers():
    response = TestClient(limited_app("5 per minute")).get("/ping")

    assert response.headers["x-ratelimit-limit"] == "5"
    assert response.headers["x-ratelimit-remaining"] == "4"


@pytest.mark.parametrize("calls", [3, 10])
def test_disabled_limiter_lets_everything_through(calls):
    client = TestClient(limited_app("1 per minute", enabled=False))

    assert all(client.get("/ping").status_code == 200 for _ in range(calls))
