# backend/scheduler/services/errors.py
"""
Expected, user-facing scheduling outcomes.

Each error carries the HTTP status and a stable machine-readable code; the
application renders them through a single exception handler.
"""

from typing import Optional


class SchedulingError(Exception):
    status_code = 400
    code = "scheduling_error"
    default_message = "Scheduling request rejected"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class ValidationError(SchedulingError):
    """Settings payload violates the scheduling policy."""

    code = "validation_error"
    default_message = "Invalid reservation settings"

    def __init__(self, errors: dict[str, str], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message)

    def to_dict(self) -> dict:
        return {**super().to_dict(), "errors": self.errors}


class BookingError(SchedulingError):
    code = "booking_error"


class ServiceUnavailable(BookingError):
    status_code = 503
    code = "service_unavailable"
    default_message = "Reservations are currently disabled"


class InvalidSlot(BookingError):
    status_code = 400
    code = "invalid_slot"
    default_message = "Requested time is not a bookable slot"


class SlotConflict(BookingError):
    status_code = 409
    code = "slot_conflict"
    default_message = "Time slot is no longer available"


class ReservationNotFound(BookingError):
    status_code = 404
    code = "not_found"
    default_message = "Reservation not found"


class IllegalTransition(BookingError):
    status_code = 409
    code = "illegal_transition"
    default_message = "Status change not allowed"
