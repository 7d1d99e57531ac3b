# backend/eventcal/config.py
"""Runtime configuration read from the environment.

The package __init__ loads a local .env first, so everything here can rely on
os.getenv. A missing database URL is a supported mode: the API starts, data
routes answer 500 and /healthz reports ``missing_config``.
"""

from __future__ import annotations

from functools import lru_cache
from os import getenv
from typing import Optional

from pydantic import BaseModel, field_validator


def _clean(s: str | None) -> str | None:
    return s.strip().rstrip("/") if s and s.strip() else None


def _flag(raw: str | None) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Typed settings container. Build from the environment with ``from_env``."""

    database_url: Optional[str] = None
    strict_dates: bool = False
    log_level: str = "INFO"
    log_format: str = "text"
    frontend_origin: str = "http://localhost:5173"
    extra_cors_origins: list[str] = []
    host: str = "0.0.0.0"
    port: int = 3001

    @field_validator("database_url", mode="before")
    @classmethod
    def blank_url_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_env(cls) -> "Settings":
        raw_extra = getenv("EXTRA_CORS_ORIGINS", "")
        return cls(
            database_url=getenv("DATABASE_URL") or getenv("POSTGRES_URL"),
            strict_dates=_flag(getenv("STRICT_DATES")),
            log_level=getenv("LOG_LEVEL", "INFO"),
            log_format=getenv("LOG_FORMAT", "text"),
            frontend_origin=_clean(getenv("FRONTEND_ORIGIN")) or "http://localhost:5173",
            extra_cors_origins=[x for x in (_clean(p) for p in raw_extra.split(",")) if x],
            host=getenv("HOST", "0.0.0.0"),
            port=int(getenv("PORT", "3001")),
        )

    @property
    def allow_origins(self) -> list[str]:
        if "*" in self.extra_cors_origins:
            return ["*"]
        return sorted({self.frontend_origin, *self.extra_cors_origins})


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
