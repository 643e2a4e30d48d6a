# todo_api/health/health_router.py

import logging
import os
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import psutil
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from todo_api.config import get_settings
from todo_api.database import get_db

logger = logging.getLogger("todo_api.health")

router = APIRouter(prefix="/health", tags=["health"])

STARTED_AT = time.monotonic()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _uptime() -> float:
    return round(time.monotonic() - STARTED_AT, 3)


def memory_usage() -> dict:
    info = psutil.Process(os.getpid()).memory_info()
    return {
        "used": round(info.rss / 1024 / 1024),
        "total": round(info.vms / 1024 / 1024),
        "unit": "MB",
    }


def database_ok(db: Session) -> bool:
    try:
        return db.execute(text("SELECT 1")).scalar() == 1
    except SQLAlchemyError:
        logger.warning("health_db_probe_failed", exc_info=True)
        return False


@router.get("")
def health(db: Session = Depends(get_db)):
    settings = get_settings()

    if not database_ok(db):
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": _now(),
                "error": "Database connection failed",
                "services": {"database": "disconnected", "api": "running"},
            },
        )

    return {
        "status": "healthy",
        "timestamp": _now(),
        "uptime": _uptime(),
        "environment": settings.app_env,
        "version": settings.app_version,
        "services": {"database": "connected", "api": "running"},
        "memory": memory_usage(),
    }


@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    if not database_ok(db):
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "timestamp": _now(), "reason": "Database connection failed"},
        )
    return {"status": "ready", "timestamp": _now()}


@router.get("/live")
def live():
    # no database access: liveness only says the process answers
    return {"status": "alive", "timestamp": _now(), "uptime": _uptime()}
