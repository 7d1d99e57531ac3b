# backend/eventcal/store.py
"""Event storage: the three supported operations plus a connectivity ping.

Callers assert the schema first (see schema.SchemaManager). Rows come back as
detached ``CalendarEvent`` instances; sessions never outlive a call.
"""

from __future__ import annotations

import logging
import re
from datetime import date, time
from typing import Optional

from sqlalchemy import and_, delete, select, text
from sqlalchemy.orm import Session

from .db import Database
from .errors import InvalidFieldError, StorageNotConfiguredError
from .models import CalendarEvent
from .validation import EventFields, MonthKey

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"(?P<h>\d{1,2}):(?P<m>\d{2})(?::(?P<s>\d{2})(?:\.(?P<frac>\d{1,6}))?)?", re.ASCII)


def _to_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidFieldError("event_date", "event_date is not a calendar date") from None


def _to_time(field: str, value: Optional[str]) -> Optional[time]:
    """Parse ``H:MM[:SS[.ffffff]]`` the way a SQL TIME column reads it."""
    if value is None:
        return None
    m = TIME_RE.fullmatch(value)
    try:
        if m is None:
            raise ValueError(value)
        frac = m.group("frac") or ""
        return time(
            int(m.group("h")), int(m.group("m")), int(m.group("s") or 0),
            int(frac.ljust(6, "0")) if frac else 0,
        )
    except ValueError:
        raise InvalidFieldError(field, f"{field} must be a time of day (H:MM[:SS])") from None


class EventStore:
    """SQL access for ``calendar_events``. No request handling here."""

    def __init__(self, database: Optional[Database]):
        self.database = database

    def _session(self) -> Session:
        if self.database is None:
            raise StorageNotConfiguredError()
        return Session(self.database.engine, autoflush=False, expire_on_commit=False)

    def list_by_month(self, month: MonthKey) -> list[CalendarEvent]:
        """Events dated inside ``month``.

        Ordered by date, then start time with untimed events first, then id.
        """
        bounds = [CalendarEvent.event_date >= month.start]
        if month.next_start is not None:
            bounds.append(CalendarEvent.event_date < month.next_start)
        q = (
            select(CalendarEvent)
            .where(and_(*bounds))
            .order_by(
                CalendarEvent.event_date.asc(),
                CalendarEvent.start_time.asc().nulls_first(),
                CalendarEvent.id.asc(),
            )
        )
        logger.debug("listing events for %s", month, extra={"month": str(month)})
        with self._session() as db:
            return list(db.execute(q).scalars().all())

    def create(self, fields: EventFields) -> CalendarEvent:
        ev = CalendarEvent(
            title=fields.title,
            event_date=_to_date(fields.event_date),
            start_time=_to_time("start_time", fields.start_time),
            end_time=_to_time("end_time", fields.end_time),
            notes=fields.notes,
        )
        with self._session() as db:
            db.add(ev)
            db.commit()
            db.refresh(ev)
        logger.info("created event %s", ev.id, extra={"event_id": ev.id})
        return ev

    def delete_by_id(self, event_id: int) -> int:
        """Delete at most one row. Returns the number of rows removed."""
        with self._session() as db:
            result = db.execute(delete(CalendarEvent).where(CalendarEvent.id == event_id))
            deleted = result.rowcount or 0
            db.commit()
        if deleted:
            logger.info("deleted event %s", event_id, extra={"event_id": event_id})
        return deleted

    def ping(self) -> None:
        """Lightweight connectivity check. Raises on error."""
        if self.database is None:
            raise StorageNotConfiguredError()
        with self.database.connect() as conn:
            conn.execute(text("SELECT 1"))
