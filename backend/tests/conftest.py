"""Shared fixtures: an in-memory SQLite storage handle and API clients.

Invariants:
    - Every test gets a fresh in-memory database
    - Tests never read DATABASE_URL / POSTGRES_URL from the developer's shell
"""

import pytest
from fastapi.testclient import TestClient

from eventcal.config import Settings
from eventcal.db import Database
from eventcal.main import create_app
from eventcal.schema import SchemaManager
from eventcal.store import EventStore
from eventcal.validation import EventFields


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for key in ("DATABASE_URL", "POSTGRES_URL", "STRICT_DATES"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def database():
    db = Database("sqlite://")
    yield db
    db.dispose()


@pytest.fixture
def schema_manager(database):
    return SchemaManager(database)


@pytest.fixture
def store(database, schema_manager):
    schema_manager.ensure_schema()
    return EventStore(database)


@pytest.fixture
def make_event(store):
    def _make(event_date, title="Event", start_time=None, end_time=None, notes=None):
        return store.create(EventFields(
            title=title, event_date=event_date,
            start_time=start_time, end_time=end_time, notes=notes,
        ))
    return _make


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://")


@pytest.fixture
def app(settings, database):
    return create_app(settings, database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def unconfigured_client():
    with TestClient(create_app(Settings(), database=None)) as c:
        yield c


class RecordingStore:
    """Stand-in for EventStore that only records what reached it."""

    def __init__(self):
        self.calls = []

    def list_by_month(self, month):
        self.calls.append(("list_by_month", month))
        return []

    def create(self, fields):
        self.calls.append(("create", fields))
        raise AssertionError("create should not be reached")

    def delete_by_id(self, event_id):
        self.calls.append(("delete_by_id", event_id))
        return 0

    def ping(self):
        self.calls.append(("ping",))


@pytest.fixture
def recording_store(app):
    fake = RecordingStore()
    app.state.services.store = fake
    return fake
