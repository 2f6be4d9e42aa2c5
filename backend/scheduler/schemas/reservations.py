# backend/scheduler/schemas/reservations.py

import datetime as dt
import re
from typing import Optional

from pydantic import Field, field_validator

from ..services.slots.config import is_time_str
from .base import CamelModel
from .reservation_settings import BusinessDay

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(v: Optional[str]) -> Optional[str]:
    if v is not None and not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email address")
    return v


class ReservationCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: str
    phone: Optional[str] = None
    service: Optional[str] = None
    date: dt.date
    time_slot: str = Field(description="Slot start in HH:MM format")
    notes: Optional[str] = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, v: str) -> str:
        if not is_time_str(v):
            raise ValueError("Time must be in HH:MM format")
        return v


class ReservationUpdate(CamelModel):
    """Admin edit of contact details; slot and status are not editable here."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"str_strip_whitespace": True}

    # Omit a field to keep it; null is only accepted for nullable columns
    @field_validator("name", "email")
    @classmethod
    def reject_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class ReservationCancel(CamelModel):
    reason: Optional[str] = None


class ReservationRead(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    service: Optional[str] = None
    date: dt.date
    time_slot: str
    duration: int
    notes: Optional[str] = None
    status: str
    cancel_reason: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class AvailableSlotsResponse(CamelModel):
    date: dt.date
    available_slots: list[str]
    business_hours: Optional[BusinessDay] = None
