# backend/scheduler/services/slots/availability.py
"""
Bookable subset of the slot grid for a day.

Grid (generator) minus slots held by occupying reservations. Slot boundaries
are grid-aligned, so a reservation blocks exactly the slot whose start equals
its time_slot.

The result is advisory: nothing is reserved here. BookingService re-checks
and the repository's unique index decides on commit.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Optional

from .config import weekday_name
from .generator import generate_slots

if TYPE_CHECKING:
    from ...schemas.reservation_settings import BusinessDay
    from ..clock import BusinessClock
    from ..repository import ReservationRepository
    from ..settings_store import SettingsStore


class AvailabilityService:

    def __init__(
        self,
        store: SettingsStore,
        repository: ReservationRepository,
        clock: BusinessClock,
    ):
        self.store = store
        self.repository = repository
        self.clock = clock

    def available_slots(self, target_date: date) -> list[str]:
        """Free slot starts ("HH:MM") for target_date, ascending."""
        settings = self.store.get()
        slots = generate_slots(target_date, settings, self.clock.now())
        if not slots:
            return []

        booked = {
            reservation.time_slot
            for reservation in self.repository.list_occupying_for_date(target_date)
        }
        return [slot.start for slot in slots if slot.start not in booked]

    def day_hours(self, target_date: date) -> Optional[BusinessDay]:
        """Business hours of target_date's weekday, None if closed."""
        settings = self.store.get()
        day = settings.business_hours.get(weekday_name(target_date))
        if day is None or not day.enabled:
            return None
        return day
