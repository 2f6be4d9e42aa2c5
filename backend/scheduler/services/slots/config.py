# backend/scheduler/services/slots/config.py
"""
Scheduling policy defaults and "HH:MM" time helpers.
"""

import re
from datetime import date

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DEFAULT_OPEN = "09:00"
DEFAULT_CLOSE = "18:00"
DEFAULT_DURATION_MINUTES = 60
DEFAULT_BUFFER_MINUTES = 15
DEFAULT_MAX_ADVANCE_DAYS = 30
DEFAULT_SERVICES = ["Consulta general", "Cita especializada", "Reunión"]

# Policy upper bounds; larger values overflow date arithmetic or the column type
MAX_SLOT_MINUTES = 24 * 60
MAX_ADVANCE_DAYS_LIMIT = 3650


def default_business_hours() -> dict[str, dict]:
    """Monday to Friday open, weekend closed."""
    return {
        day: {
            "enabled": day not in ("saturday", "sunday"),
            "open": DEFAULT_OPEN,
            "close": DEFAULT_CLOSE,
        }
        for day in WEEKDAYS
    }


def weekday_name(target_date: date) -> str:
    """Key of target_date in business_hours (0 = Monday)."""
    return WEEKDAYS[target_date.weekday()]


def is_time_str(value: str) -> bool:
    return bool(TIME_PATTERN.match(value))


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes after midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time_str(total_minutes: int) -> str:
    """Convert minutes after midnight to "HH:MM"."""
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"
