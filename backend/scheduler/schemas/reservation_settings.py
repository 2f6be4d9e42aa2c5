# backend/scheduler/schemas/reservation_settings.py

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from ..services.slots.config import is_time_str
from .base import CamelModel


class BusinessDay(CamelModel):
    enabled: bool
    open: str
    close: str

    @field_validator("open", "close")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not is_time_str(v):
            raise ValueError("Time must be in HH:MM format")
        return v


class ReservationSettingsRead(CamelModel):
    business_hours: dict[str, BusinessDay]
    default_duration: int
    buffer_time: int
    max_advance_days: int
    allowed_services: list[str]
    is_active: bool
    updated_at: Optional[datetime] = None


class ReservationSettingsUpdate(CamelModel):
    """Partial update; omitted fields keep their stored value.

    Range checks live in SettingsStore so that every violated field is
    reported together.
    """

    business_hours: Optional[dict[str, BusinessDay]] = None
    default_duration: Optional[int] = None
    buffer_time: Optional[int] = None
    max_advance_days: Optional[int] = None
    allowed_services: Optional[list[str]] = None
    is_active: Optional[bool] = None
