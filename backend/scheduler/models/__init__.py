from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata

from .reservations import (  # noqa: E402
    OCCUPYING_STATUSES,
    Reservation,
    ReservationSettings,
    ReservationStatus,
)

__all__ = [
    "Base",
    "metadata",
    "OCCUPYING_STATUSES",
    "Reservation",
    "ReservationSettings",
    "ReservationStatus",
]
