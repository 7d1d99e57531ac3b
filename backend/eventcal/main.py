# backend/eventcal/main.py
"""HTTP surface of the calendar service.

Each events path owns a small dispatch table mapping HTTP methods to
handlers; a method outside the table gets 405 with an ``Allow`` header
built from that table. Handlers are plain blocking functions and run in
the threadpool.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from . import __version__
from .config import Settings, get_settings
from .db import Database, create_database
from .errors import CalendarError, EventNotFoundError, StorageNotConfiguredError
from .observability import setup_logging
from .schema import SchemaManager
from .schemas import EventEnvelope, EventList, EventOut
from .store import EventStore
from .validation import normalize_create_fields, validate_id, validate_month

logger = logging.getLogger(__name__)

_FROM_SETTINGS = object()

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@dataclass
class Services:
    """Collaborators shared by every request of one app instance."""
    settings: Settings
    database: Optional[Database]
    schema: SchemaManager
    store: EventStore


@dataclass
class Call:
    """Transport-free view of a request handed to a handler."""
    query: dict[str, str] = field(default_factory=dict)
    path: dict[str, str] = field(default_factory=dict)
    body: Any = None


def _require_schema(services: Services) -> None:
    if not services.schema.ensure_schema():
        raise StorageNotConfiguredError()


# ───────────────────────── Handlers ─────────────────────────────────
def list_events(services: Services, call: Call) -> Response:
    _require_schema(services)
    month = validate_month(call.query.get("month", ""))
    rows = services.store.list_by_month(month)
    payload = EventList(events=[EventOut.model_validate(r) for r in rows])
    return JSONResponse(payload.model_dump(mode="json"))


def create_event(services: Services, call: Call) -> Response:
    _require_schema(services)
    fields = normalize_create_fields(call.body, strict_dates=services.settings.strict_dates)
    ev = services.store.create(fields)
    payload = EventEnvelope(event=EventOut.model_validate(ev))
    return JSONResponse(payload.model_dump(mode="json"), status_code=status.HTTP_201_CREATED)


def delete_event(services: Services, call: Call) -> Response:
    _require_schema(services)
    event_id = validate_id(call.path.get("event_id"))
    if services.store.delete_by_id(event_id) == 0:
        raise EventNotFoundError(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


Handler = Callable[[Services, Call], Response]

EVENT_COLLECTION: dict[str, Handler] = {"GET": list_events, "POST": create_event}
EVENT_ITEM: dict[str, Handler] = {"DELETE": delete_event}


# ───────────────────────── Dispatch ─────────────────────────────────
async def _read_json(request: Request) -> Any:
    """Parse the body as JSON. Anything unparseable counts as empty input."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return {}


async def dispatch(request: Request, table: dict[str, Handler]) -> Response:
    handler = table.get(request.method)
    if handler is None:
        return JSONResponse(
            {"error": "method not allowed"},
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            headers={"Allow": ", ".join(table)},
        )
    call = Call(
        query=dict(request.query_params),
        path=dict(request.path_params),
        body=await _read_json(request) if request.method in ("POST", "PUT", "PATCH") else None,
    )
    return await run_in_threadpool(handler, request.app.state.services, call)


# ───────────────────────── App factory ──────────────────────────────
def create_app(settings: Optional[Settings] = None, database: Any = _FROM_SETTINGS) -> FastAPI:
    """Build the API.

    ``database`` defaults to a handle for ``settings.database_url``; pass a
    ``Database`` (or None for the unconfigured mode) to substitute storage.
    """
    settings = settings or get_settings()
    if database is _FROM_SETTINGS:
        database = create_database(settings.database_url)

    services = Services(
        settings=settings,
        database=database,
        schema=SchemaManager(database),
        store=EventStore(database),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        if services.database is None:
            logger.warning("no DATABASE_URL or POSTGRES_URL configured; data routes will fail")
        logger.info("calendar API started")
        yield
        if services.database is not None:
            services.database.dispose()
        logger.info("calendar API shutting down")

    app = FastAPI(title="Calendar API", version=__version__, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=86400,
    )

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    @app.api_route("/api/events", methods=ALL_METHODS)
    async def events_collection(request: Request):
        return await dispatch(request, EVENT_COLLECTION)

    @app.api_route("/api/events/{event_id}", methods=ALL_METHODS)
    async def events_item(request: Request):
        return await dispatch(request, EVENT_ITEM)

    @app.get("/healthz")
    def healthz(request: Request):
        services: Services = request.app.state.services
        try:
            if not services.schema.ensure_schema():
                return {"status": "ok", "db": "missing_config"}
            services.store.ping()
        except Exception:
            logger.error("health check failed", exc_info=True)
            return JSONResponse(
                {"status": "degraded", "db": "error"},
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return {"status": "ok", "db": "ok"}

    @app.get("/api/version")
    def version():
        return {"name": "calendar-api", "version": __version__}


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(CalendarError)
    async def calendar_error_handler(request: Request, exc: CalendarError):
        level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
        logger.log(
            level, "%s: %s", exc.code, exc.message,
            extra={"error_code": exc.code, "path": request.url.path, "method": request.method},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled exception on %s", request.url.path,
            exc_info=exc, extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "internal server error"},
        )
