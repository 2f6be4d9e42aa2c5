# backend/scheduler/services/repository.py
"""
Persistence boundary for reservations.

The partial unique index on (date, time_slot) is the only arbiter of slot
conflicts: inserts are not preceded by any lock, and a losing insert surfaces
as SlotConflict with its transaction rolled back.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import OCCUPYING_STATUSES, Reservation
from .errors import SlotConflict

logger = logging.getLogger(__name__)


class ReservationRepository:

    def __init__(self, db: Session):
        self.db = db

    # ── Write ────────────────────────────────────────────────────────────

    def add(self, **fields) -> Reservation:
        """Insert a reservation; raises SlotConflict if the slot is taken."""
        obj = Reservation(**fields)
        self.db.add(obj)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                f"Slot conflict on insert: date={fields.get('date')} "
                f"time_slot={fields.get('time_slot')}"
            )
            raise SlotConflict() from None
        self.db.refresh(obj)
        return obj

    def transition(
        self,
        reservation_id: int,
        from_statuses: Iterable[str],
        to_status: str,
        **extra,
    ) -> Optional[Reservation]:
        """
        Move a reservation to to_status if it is currently in from_statuses.

        Single conditional UPDATE, so concurrent transitions of the same row
        cannot both win.

        Returns:
            Updated reservation, or None if no row matched.
        """
        values = {"status": to_status, "updated_at": func.now(), **extra}
        updated = (
            self.db.query(Reservation)
            .filter(
                Reservation.id == reservation_id,
                Reservation.status.in_(list(from_statuses)),
            )
            .update(values, synchronize_session=False)
        )
        if not updated:
            self.db.rollback()
            return None

        self.db.commit()
        return self.get(reservation_id)

    def update_fields(self, reservation_id: int, fields: dict) -> Optional[Reservation]:
        obj = self.get(reservation_id)
        if obj is None:
            return None
        if not fields:
            return obj

        for field, value in fields.items():
            setattr(obj, field, value)
        obj.updated_at = func.now()

        self.db.commit()
        self.db.refresh(obj)
        return obj

    # ── Read ─────────────────────────────────────────────────────────────

    def get(self, reservation_id: int) -> Optional[Reservation]:
        return self.db.get(Reservation, reservation_id)

    def list_all(
        self,
        status: Optional[str] = None,
        target_date: Optional[date] = None,
    ) -> list[Reservation]:
        """All reservations, newest first, optionally filtered."""
        query = self.db.query(Reservation)
        if status is not None:
            query = query.filter(Reservation.status == status)
        if target_date is not None:
            query = query.filter(Reservation.date == target_date.isoformat())
        return query.order_by(Reservation.created_at.desc(), Reservation.id.desc()).all()

    def list_occupying_for_date(self, target_date: date) -> list[Reservation]:
        """Reservations that keep their slot taken on target_date."""
        return (
            self.db.query(Reservation)
            .filter(
                Reservation.date == target_date.isoformat(),
                Reservation.status.in_(OCCUPYING_STATUSES),
            )
            .order_by(Reservation.time_slot)
            .all()
        )
