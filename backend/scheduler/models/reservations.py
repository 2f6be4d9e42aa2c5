import enum

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, Text, func, text

from . import Base


class ReservationStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Statuses that keep a (date, time_slot) taken. Only cancellation frees a slot.
OCCUPYING_STATUSES = (
    ReservationStatus.PENDING.value,
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.COMPLETED.value,
)

_OCCUPYING_WHERE = "status IN ('pending', 'confirmed', 'completed')"


class ReservationSettings(Base):
    __tablename__ = 'reservation_settings'

    id = Column(Integer, primary_key=True)
    business_hours = Column(JSON, nullable=False)
    default_duration = Column(Integer, nullable=False, server_default=text('60'))
    buffer_time = Column(Integer, nullable=False, server_default=text('15'))
    max_advance_days = Column(Integer, nullable=False, server_default=text('30'))
    allowed_services = Column(JSON, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=text('1'))
    updated_at = Column(DateTime, nullable=False, server_default=func.now())


class Reservation(Base):
    __tablename__ = 'reservations'
    __table_args__ = (
        # One occupying reservation per slot; enforced by the database so that
        # concurrent inserts are decided atomically.
        Index(
            'uq_reservations_occupied_slot',
            'date',
            'time_slot',
            unique=True,
            sqlite_where=text(_OCCUPYING_WHERE),
            postgresql_where=text(_OCCUPYING_WHERE),
        ),
    )

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text)
    service = Column(Text)
    date = Column(Text, nullable=False, index=True)  # YYYY-MM-DD
    time_slot = Column(Text, nullable=False)  # HH:MM
    duration = Column(Integer, nullable=False, server_default=text('60'))
    notes = Column(Text)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    cancel_reason = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())
