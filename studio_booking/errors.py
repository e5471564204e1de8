"""
Booking error taxonomy.

Every error carries a ``kind`` discriminator and a human-readable message so
API handlers and the HTTP client can map them back and forth without parsing
text. The UI layer decides how to present them.
"""

from typing import Optional


class BookingError(Exception):
    """Base exception for booking/availability errors."""

    kind = "booking_error"
    status_code = 400

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        self.message = message
        self.fields = list(fields or [])
        super().__init__(message)

    def to_dict(self) -> dict:
        payload = {"kind": self.kind, "message": self.message}
        if self.fields:
            payload["fields"] = self.fields
        return payload


class ValidationError(BookingError):
    """Bad input shape or values; the caller can correct the named fields."""

    kind = "validation_error"
    status_code = 422


class InvalidServiceError(BookingError):
    kind = "invalid_service"
    status_code = 422


class InvalidDateError(BookingError):
    kind = "invalid_date"
    status_code = 422


class SlotUnavailableError(BookingError):
    """Requested slot was claimed concurrently; re-fetch availability and pick another."""

    kind = "slot_unavailable"
    status_code = 409


class InvalidTransitionError(BookingError):
    kind = "invalid_transition"
    status_code = 409


class NotFoundError(BookingError):
    kind = "not_found"
    status_code = 404


class StorageError(BookingError):
    """Backing store failure. Not retried by the core."""

    kind = "storage_error"
    status_code = 503


ERRORS_BY_KIND = {
    cls.kind: cls
    for cls in (
        ValidationError,
        InvalidServiceError,
        InvalidDateError,
        SlotUnavailableError,
        InvalidTransitionError,
        NotFoundError,
        StorageError,
    )
}
