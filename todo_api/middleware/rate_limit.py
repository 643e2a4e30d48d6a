# todo_api/middleware/rate_limit.py

"""Per-client request limiting (slowapi), keyed on the remote address."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from todo_api.middleware.error_handler import error_body

TOO_MANY_REQUESTS = "Too many requests from this IP, please try again later."


def make_limiter(limit: str, enabled: bool = True, storage_uri: str = "memory://") -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        default_limits=[limit],
        headers_enabled=True,
        enabled=enabled,
        storage_uri=storage_uri,
    )


# sync on purpose: SlowAPIMiddleware calls the handler without awaiting it
def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    response = JSONResponse(
        status_code=429,
        content=error_body(request, 429, TOO_MANY_REQUESTS, [f"Rate limit exceeded: {exc.detail}"]),
    )
    return request.app.state.limiter._inject_headers(
        response, getattr(request.state, "view_rate_limit", None)
    )


def install_rate_limiting(app: FastAPI, limiter: Limiter) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
