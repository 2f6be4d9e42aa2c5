# backend/scheduler/services/slots/generator.py
"""
Candidate slot grid for a single day.

Produces fixed-length slots laid out from opening time:

  [open, open + duration), [open + step, open + step + duration), ...

with step = duration + buffer. A slot is emitted only if it ends by closing
time.

Contains:
✓ business hours of the weekday
✓ booking horizon (max_advance_days)
✓ active flag
✓ past-time cut-off for today

Does NOT contain:
✗ Reservations (filtered by AvailabilityService)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from .config import minutes_to_time_str, time_str_to_minutes, weekday_name

if TYPE_CHECKING:
    from ...schemas.reservation_settings import ReservationSettingsRead


@dataclass(frozen=True)
class TimeSlot:
    date: date
    start: str  # "HH:MM"
    end: str  # "HH:MM"


def generate_slots(
    target_date: date,
    settings: ReservationSettingsRead,
    now: datetime,
) -> list[TimeSlot]:
    """
    Build the ordered slot grid for target_date.

    `now` is the current wall-clock time in the business timezone (naive).

    Returns:
        Slots in chronological order. Empty list = nothing bookable.
    """
    today = now.date()

    # Step 1: Policy gates
    if not settings.is_active:
        return []
    if target_date < today:
        return []
    if target_date > today + timedelta(days=settings.max_advance_days):
        return []

    day = settings.business_hours.get(weekday_name(target_date))
    if day is None or not day.enabled:
        return []

    # Step 2: Lay out the grid
    duration = settings.default_duration
    step = duration + settings.buffer_time
    close_min = time_str_to_minutes(day.close)

    slots: list[TimeSlot] = []
    cursor = time_str_to_minutes(day.open)
    while cursor + duration <= close_min:
        slots.append(TimeSlot(
            date=target_date,
            start=minutes_to_time_str(cursor),
            end=minutes_to_time_str(cursor + duration),
        ))
        cursor += step

    # Step 3: No booking into the past or the current instant
    if target_date == today:
        midnight = datetime.combine(target_date, datetime.min.time())
        slots = [
            slot for slot in slots
            if midnight + timedelta(minutes=time_str_to_minutes(slot.start)) > now
        ]

    return slots


def slot_starts(slots: list[TimeSlot]) -> list[str]:
    return [slot.start for slot in slots]
