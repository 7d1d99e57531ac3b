# backend/eventcal/schemas.py
from __future__ import annotations
from typing import Optional
from datetime import date, time
from pydantic import BaseModel, ConfigDict, field_serializer


def format_time(value: Optional[time]) -> Optional[str]:
    """HH:MM when the seconds are zero, HH:MM:SS[.ffffff] otherwise."""
    if value is None:
        return None
    if value.second == 0 and value.microsecond == 0:
        return value.strftime("%H:%M")
    return value.isoformat()


class EventOut(BaseModel):
    """Response schema for an event row. ``created_at`` stays server-side."""
    id: int
    title: str
    event_date: date
    start_time: Optional[time] = None
    end_time:   Optional[time] = None
    notes:      Optional[str] = None
    model_config = ConfigDict(from_attributes=True)  # allow from ORM

    @field_serializer("start_time", "end_time")
    def _times(self, value: Optional[time]) -> Optional[str]:
        return format_time(value)


class EventList(BaseModel):
    events: list[EventOut]


class EventEnvelope(BaseModel):
    event: EventOut
