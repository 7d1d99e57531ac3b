# backend/eventcal/validation.py
"""Request value validation and normalization. Pure functions, no I/O."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, NamedTuple, Optional

from .errors import InvalidFieldError

MONTH_RE = re.compile(r"\d{4}-\d{2}", re.ASCII)
DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
ID_RE = re.compile(r"\d+", re.ASCII)

# BIGINT upper bound of the id column
MAX_EVENT_ID = 2**63 - 1


class MonthKey(NamedTuple):
    """A year-month used to select a range of events. Never stored."""
    year: int
    month: int

    @property
    def start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def next_start(self) -> Optional[date]:
        """First day of the following month; None past the last representable month."""
        if self.month == 12:
            if self.year == date.max.year:
                return None
            return date(self.year + 1, 1, 1)
        return date(self.year, self.month + 1, 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class EventFields:
    """Normalized create input. Absent optional values are None, never ""."""
    title: str
    event_date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional(value: Any) -> Optional[str]:
    text = _as_text(value).strip()
    return text or None


def validate_month(value: Any) -> MonthKey:
    raw = _as_text(value)
    if not MONTH_RE.fullmatch(raw):
        raise InvalidFieldError("month", "month must be YYYY-MM")
    year, month = int(raw[:4]), int(raw[5:])
    if year < 1 or not 1 <= month <= 12:
        raise InvalidFieldError("month", "month must be YYYY-MM")
    return MonthKey(year, month)


def validate_date_string(value: Any, strict: bool = False) -> str:
    """Accept ``YYYY-MM-DD``.

    Only the shape is checked unless ``strict`` is set, so ``2024-02-31``
    passes here and is left to the storage type.
    """
    raw = _as_text(value).strip()
    if not DATE_RE.fullmatch(raw):
        raise InvalidFieldError("event_date", "event_date must be YYYY-MM-DD")
    if strict:
        try:
            date.fromisoformat(raw)
        except ValueError:
            raise InvalidFieldError("event_date", "event_date is not a calendar date") from None
    return raw


def normalize_create_fields(body: Any, strict_dates: bool = False) -> EventFields:
    if not isinstance(body, dict):
        body = {}

    title = _as_text(body.get("title")).strip()
    if not title:
        raise InvalidFieldError("title", "title is required")

    return EventFields(
        title=title,
        event_date=validate_date_string(body.get("event_date"), strict=strict_dates),
        start_time=_optional(body.get("start_time")),
        end_time=_optional(body.get("end_time")),
        notes=_optional(body.get("notes")),
    )


def validate_id(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidFieldError("id", "id must be a positive integer")
    if isinstance(value, int):
        event_id = value
    else:
        raw = _as_text(value).strip()
        if not ID_RE.fullmatch(raw) or len(raw.lstrip("0")) > len(str(MAX_EVENT_ID)):
            raise InvalidFieldError("id", "id must be a positive integer")
        event_id = int(raw)
    if not 0 < event_id <= MAX_EVENT_ID:
        raise InvalidFieldError("id", "id must be a positive integer")
    return event_id
