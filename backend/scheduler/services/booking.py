# backend/scheduler/services/booking.py
"""
Reservation commit protocol and status state machine.

    pending ──► confirmed ──► completed
       │            │
       └────────────┴──► cancelled

cancelled and completed are terminal.

create_reservation:
1. Reject when scheduling is disabled (ServiceUnavailable)
2. Reject a (date, time_slot) the current policy would not generate (InvalidSlot)
3. Insert; the unique index decides races (SlotConflict)
4. Notify, fire-and-forget
"""

import logging
from typing import Optional

from ..models import Reservation, ReservationStatus
from ..schemas.reservations import ReservationCreate
from .clock import BusinessClock
from .errors import IllegalTransition, InvalidSlot, ReservationNotFound, ServiceUnavailable
from .events import BookingNotifier
from .repository import ReservationRepository
from .settings_store import SettingsStore
from .slots import generate_slots, slot_starts

logger = logging.getLogger(__name__)

PENDING = ReservationStatus.PENDING.value
CONFIRMED = ReservationStatus.CONFIRMED.value
CANCELLED = ReservationStatus.CANCELLED.value
COMPLETED = ReservationStatus.COMPLETED.value

# target status → statuses it may be reached from
TRANSITIONS: dict[str, tuple[str, ...]] = {
    CONFIRMED: (PENDING,),
    COMPLETED: (CONFIRMED,),
    CANCELLED: (PENDING, CONFIRMED),
}

EDITABLE_FIELDS = ("name", "email", "phone", "service", "notes")


class BookingService:

    def __init__(
        self,
        repository: ReservationRepository,
        store: SettingsStore,
        clock: BusinessClock,
        notifier: Optional[BookingNotifier] = None,
    ):
        self.repository = repository
        self.store = store
        self.clock = clock
        self.notifier = notifier

    # ── Create ───────────────────────────────────────────────────────────

    def create_reservation(self, data: ReservationCreate) -> Reservation:
        settings = self.store.get()

        # Step 1: Scheduling switched off
        if not settings.is_active:
            raise ServiceUnavailable()

        # Step 2: Slot must belong to the current grid
        grid = slot_starts(generate_slots(data.date, settings, self.clock.now()))
        if data.time_slot not in grid:
            logger.info(f"Rejected off-grid slot: {data.date} {data.time_slot}")
            raise InvalidSlot(
                f"{data.time_slot} on {data.date.isoformat()} is not a bookable slot"
            )

        # Step 3: Atomic insert
        reservation = self.repository.add(
            name=data.name,
            email=data.email,
            phone=data.phone,
            service=data.service,
            date=data.date.isoformat(),
            time_slot=data.time_slot,
            duration=settings.default_duration,
            notes=data.notes,
            status=PENDING,
        )

        logger.info(
            f"Reservation created: id={reservation.id}, "
            f"time={reservation.date} {reservation.time_slot}, service={reservation.service}"
        )

        # Step 4: Notify
        self._notify("reservation_created", reservation)
        return reservation

    # ── Transitions ──────────────────────────────────────────────────────

    def confirm(self, reservation_id: int) -> Reservation:
        return self._transition(reservation_id, CONFIRMED)

    def complete(self, reservation_id: int) -> Reservation:
        return self._transition(reservation_id, COMPLETED)

    def cancel(self, reservation_id: int, reason: Optional[str] = None) -> Reservation:
        return self._transition(reservation_id, CANCELLED, cancel_reason=reason)

    def _transition(self, reservation_id: int, to_status: str, **extra) -> Reservation:
        sources = TRANSITIONS[to_status]
        reservation = self.repository.transition(reservation_id, sources, to_status, **extra)

        if reservation is None:
            current = self.repository.get(reservation_id)
            if current is None:
                raise ReservationNotFound()
            raise IllegalTransition(f"Cannot change status from {current.status} to {to_status}")

        logger.info(f"Reservation {reservation_id} → {to_status}")
        self._notify(f"reservation_{to_status}", reservation)
        return reservation

    # ── Admin edits / reads ──────────────────────────────────────────────

    def update_details(self, reservation_id: int, fields: dict) -> Reservation:
        """Edit contact details and notes; slot and status stay untouched."""
        changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        reservation = self.repository.update_fields(reservation_id, changes)
        if reservation is None:
            raise ReservationNotFound()
        return reservation

    def get(self, reservation_id: int) -> Reservation:
        reservation = self.repository.get(reservation_id)
        if reservation is None:
            raise ReservationNotFound()
        return reservation

    def _notify(self, event_type: str, reservation: Reservation) -> None:
        if self.notifier is not None:
            self.notifier.notify(event_type, reservation)
