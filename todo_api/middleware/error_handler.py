# todo_api/middleware/error_handler.py

"""Uniform JSON error envelope and storage error classification."""

from __future__ import annotations

import logging
import traceback
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_api.config import get_settings
from todo_api.task.task_service import TaskServiceError

logger = logging.getLogger("todo_api.errors")

INTERNAL_ERROR = (500, "Internal Server Error")
CONNECTION_FAILED = (503, "Database connection failed")

# SQLSTATE -> (status, message)
DB_ERROR_TABLE = {
    "23505": (409, "Resource already exists"),
    "23503": (400, "Referenced resource does not exist"),
    "23502": (400, "Required field is missing"),
    "23514": (400, "Invalid field value"),
    "42P01": (500, "Database table not found"),
}

# SQLite has no SQLSTATE; its messages map onto the same codes
SQLITE_MESSAGES = (
    ("unique constraint failed", "23505"),
    ("foreign key constraint failed", "23503"),
    ("not null constraint failed", "23502"),
    ("check constraint failed", "23514"),
    ("no such table", "42P01"),
)


def sqlstate_of(exc: DBAPIError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return str(code)

    message = str(orig or exc).lower()
    for fragment, sqlstate in SQLITE_MESSAGES:
        if fragment in message:
            return sqlstate
    return None


def classify_db_error(exc: DBAPIError) -> Tuple[int, str]:
    """Map a SQLAlchemy/DBAPI error to ``(status_code, message)``."""
    sqlstate = sqlstate_of(exc)
    if sqlstate in DB_ERROR_TABLE:
        return DB_ERROR_TABLE[sqlstate]
    if sqlstate and sqlstate.startswith("08"):
        return CONNECTION_FAILED
    if isinstance(exc, OperationalError) or exc.connection_invalidated:
        return CONNECTION_FAILED
    return INTERNAL_ERROR


def error_body(
    request: Request,
    status_code: int,
    error: str,
    details: Optional[List[str]] = None,
    **extra,
) -> dict:
    body = {
        "error": error,
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    if details:
        body["details"] = details
    body.update(extra)
    return body


def _validation_messages(exc: RequestValidationError) -> List[str]:
    messages = []
    for err in exc.errors():
        # drop the "body"/"query"/"path" prefix
        loc = [str(part) for part in err.get("loc", ())[1:]]
        field = ".".join(loc) or "body"
        messages.append(f"{field}: {err.get('msg')}")
    return messages


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = _validation_messages(exc)
    logger.info("validation_failed", extra={"path": request.url.path, "errors": len(details)})
    return JSONResponse(status_code=400, content=error_body(request, 400, "Validation Error", details))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content=error_body(
                request, 404, "Not Found",
                message=f"Route {request.method} {request.url.path} not found",
            ),
            headers=getattr(exc, "headers", None),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def task_error_handler(request: Request, exc: TaskServiceError):
    return JSONResponse(status_code=exc.status_code, content=error_body(request, exc.status_code, str(exc)))


async def db_error_handler(request: Request, exc: DBAPIError):
    status_code, message = classify_db_error(exc)
    if status_code >= 500:
        logger.error("db_error", exc_info=exc, extra={"path": request.url.path, "status_code": status_code})
    else:
        logger.warning("db_constraint_violation", extra={"path": request.url.path, "status_code": status_code})
    return _server_error(request, exc, status_code, message)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", exc_info=exc, extra={"path": request.url.path})
    return _server_error(request, exc, *INTERNAL_ERROR)


def _server_error(request: Request, exc: Exception, status_code: int, message: str) -> JSONResponse:
    settings = get_settings()
    extra = {}

    # never leak internals of a 500 outside development
    if status_code == 500 and not settings.is_development:
        message = INTERNAL_ERROR[1]
    elif status_code == 500:
        extra["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    return JSONResponse(status_code=status_code, content=error_body(request, status_code, message, **extra))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(TaskServiceError, task_error_handler)
    app.add_exception_handler(DBAPIError, db_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
