# backend/eventcal/errors.py
"""Error hierarchy for the event service.

Every error carries a stable ``code`` and the HTTP status the API answers
with. Messages are safe to show to clients.
"""

from __future__ import annotations


class CalendarError(Exception):
    """Base exception for all calendar service errors."""

    def __init__(self, message: str, code: str, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_response(self) -> dict:
        return {"error": self.message}


class InvalidFieldError(CalendarError):
    """A request value failed validation. Never reaches storage."""

    def __init__(self, field: str, message: str):
        super().__init__(message, "VALIDATION_ERROR", 400)
        self.field = field


class EventNotFoundError(CalendarError):
    def __init__(self, event_id: int):
        super().__init__("event not found", "EVENT_NOT_FOUND", 404)
        self.event_id = event_id


class StorageNotConfiguredError(CalendarError):
    """No connection string was configured for the process."""

    def __init__(self):
        super().__init__(
            "DATABASE_URL or POSTGRES_URL is required",
            "STORAGE_NOT_CONFIGURED", 500,
        )
