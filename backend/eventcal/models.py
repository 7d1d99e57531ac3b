from __future__ import annotations
from typing import Optional
from datetime import date, datetime, time

from sqlalchemy import BigInteger, Date, DateTime, Index, Integer, Text, Time, func
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base

# sqlite only autoincrements INTEGER PRIMARY KEY
EventId = BigInteger().with_variant(Integer, "sqlite")


class CalendarEvent(Base):
    __tablename__ = "calendar_events"
    __table_args__ = (
        Index("idx_calendar_events_event_date", "event_date"),
        {"sqlite_autoincrement": True},
    )

    id:         Mapped[int]            = mapped_column(EventId, primary_key=True, autoincrement=True)
    title:      Mapped[str]            = mapped_column(Text, nullable=False)
    event_date: Mapped[date]           = mapped_column(Date, nullable=False)
    start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    end_time:   Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    notes:      Mapped[Optional[str]]  = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime]       = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
