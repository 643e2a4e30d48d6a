# todo_api/config.py

"""Settings loaded from environment variables (+ optional .env)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

# ---------------- ENV ----------------
load_dotenv(override=False)


def _env(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.split(",") if p.strip()]


@dataclass(frozen=True)
class Settings:
    app_env: str
    app_version: str
    host: str
    port: int

    database_url: str
    db_echo: bool
    db_pool_size: int
    db_pool_timeout: int

    allowed_origins: List[str]
    rate_limit: str
    rate_limit_enabled: bool
    rate_limit_storage_uri: str
    log_level: str

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


def load_settings() -> Settings:
    return Settings(
        app_env=_env("APP_ENV", "development").lower(),
        app_version=_env("APP_VERSION", "1.0.0"),
        host=_env("HOST", "0.0.0.0"),
        port=_env_int("PORT", 3000),
        database_url=_env("DATABASE_URL", "sqlite:///./app.db"),
        db_echo=_env_bool("DB_ECHO", False),
        db_pool_size=_env_int("DB_POOL_SIZE", 5),
        db_pool_timeout=_env_int("DB_POOL_TIMEOUT", 30),
        allowed_origins=_env_list("ALLOWED_ORIGINS", ["http://localhost:3000"]),
        rate_limit=_env("RATE_LIMIT", "100 per 15 minutes"),
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", True),
        rate_limit_storage_uri=_env("RATE_LIMIT_STORAGE_URI", "memory://"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
