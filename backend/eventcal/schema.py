# backend/eventcal/schema.py
"""Idempotent schema assertion for the events table.

There is no migration step: every request asserts the table and its date
index with create-if-absent DDL, which is safe to repeat and to race.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.schema import CreateIndex, CreateTable

from .db import Database
from .models import CalendarEvent

logger = logging.getLogger(__name__)

events_table = CalendarEvent.__table__


class SchemaManager:
    def __init__(self, database: Optional[Database]):
        self.database = database

    def ensure_schema(self) -> bool:
        """Create the table and index if absent.

        Returns False without touching the network when no database is
        configured, True once both statements have run.
        """
        if self.database is None:
            return False

        with self.database.begin() as conn:
            conn.execute(CreateTable(events_table, if_not_exists=True))
            for index in events_table.indexes:
                conn.execute(CreateIndex(index, if_not_exists=True))
        logger.debug("schema asserted for %s", events_table.name)
        return True
