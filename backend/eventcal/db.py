# backend/eventcal/db.py
"""Database handle and base model setup."""

from __future__ import annotations

import threading
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool


def _normalize_db_url(url: str) -> str:
    """Normalize common Postgres URLs to the psycopg2 driver form."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg2://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return url


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        opts: dict = {"connect_args": {"check_same_thread": False}}
        # an in-memory database only exists on its one connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            opts["poolclass"] = StaticPool
        return opts
    return {"pool_pre_ping": True, "connect_args": {"connect_timeout": 5}}


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


class Database:
    """Storage handle shared by the schema manager and the event store.

    The engine (and its connection pool) is built on first use and kept for
    the lifetime of the handle.
    """

    def __init__(self, url: str):
        self.url = _normalize_db_url(url)
        self._engine: Optional[Engine] = None
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = create_engine(
                        self.url, echo=False, future=True, **_engine_options(self.url),
                    )
        return self._engine

    def connect(self):
        return self.engine.connect()

    def begin(self):
        return self.engine.begin()

    def dispose(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None


def create_database(url: Optional[str]) -> Optional[Database]:
    """Return a handle for ``url``, or None when no URL is configured."""
    if not url:
        return None
    return Database(url)
