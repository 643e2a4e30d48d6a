# todo_api/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from todo_api.config import get_settings
from todo_api.database import Base, engine
from todo_api.logging_setup import setup_logging
from todo_api.middleware.error_handler import register_error_handlers
from todo_api.middleware.request_logger import log_requests, security_headers
from todo_api.middleware.rate_limit import install_rate_limiting, make_limiter
from todo_api.models.task import Task  # noqa: F401

settings = get_settings()
logger = logging.getLogger("todo_api")


# ---------------- LIFESPAN ----------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("checking_database_models")
    Base.metadata.create_all(bind=engine)
    logger.info("server_started", extra={"environment": settings.app_env, "version": settings.app_version})
    try:
        yield
    finally:
        logger.info("shutting_down")
        engine.dispose()
        logger.info("database_connections_closed")


app = FastAPI(title="Todo API", version=settings.app_version, lifespan=lifespan)

# ---------------- MIDDLEWARE ----------------
# registration order is inside-out: the request logger wraps everything
app.middleware("http")(security_headers)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_rate_limiting(
    app,
    make_limiter(
        settings.rate_limit,
        enabled=settings.rate_limit_enabled,
        storage_uri=settings.rate_limit_storage_uri,
    ),
)
app.middleware("http")(log_requests)

# ---------------- ERRORS ----------------
register_error_handlers(app)

# ---------------- ROUTERS ----------------
from todo_api.health.health_router import router as health_router  # noqa: E402
from todo_api.task.task_router import router as task_router  # noqa: E402

app.include_router(health_router)
app.include_router(task_router)


def run() -> None:
    import uvicorn

    setup_logging(settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
