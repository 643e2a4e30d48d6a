from __future__ import annotations

import logging
import time

from fastapi import Request

logger = logging.getLogger("todo_api.http")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


async def log_requests(request: Request, call_next):
    """Log every request once on the way in and once on the way out."""
    start = time.perf_counter()
    logger.info(
        "request_started",
        extra={
            "method": request.method,
            "url": str(request.url.path),
            "ip": _client_ip(request),
            "user_agent": request.headers.get("user-agent"),
        },
    )

    try:
        response = await call_next(request)
    except Exception:
        logger.error(
            "request_failed",
            extra={
                "method": request.method,
                "url": str(request.url.path),
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        raise

    duration_ms = round((time.perf_counter() - start) * 1000, 2)
    logger.info(
        "request_completed",
        extra={
            "method": request.method,
            "url": str(request.url.path),
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "ip": _client_ip(request),
        },
    )
    return response


async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response
