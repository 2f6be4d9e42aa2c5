# backend/scheduler/services/settings_store.py
"""
Reservation settings: a single row holding the scheduling policy.

Reads create the default row (fixed id) on first use; a concurrent first read
that loses the insert re-reads the winner's row. Updates are a short
read-validate-write transaction; concurrent administrative edits resolve as
last writer wins.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import ReservationSettings
from ..schemas.reservation_settings import ReservationSettingsRead, ReservationSettingsUpdate
from .errors import ValidationError
from .slots.config import (
    DEFAULT_BUFFER_MINUTES,
    DEFAULT_DURATION_MINUTES,
    DEFAULT_MAX_ADVANCE_DAYS,
    DEFAULT_SERVICES,
    MAX_ADVANCE_DAYS_LIMIT,
    MAX_SLOT_MINUTES,
    WEEKDAYS,
    default_business_hours,
    time_str_to_minutes,
)

logger = logging.getLogger(__name__)

SETTINGS_ROW_ID = 1

_POLICY_FIELDS = (
    "business_hours",
    "default_duration",
    "buffer_time",
    "max_advance_days",
    "allowed_services",
    "is_active",
)


class SettingsStore:

    def __init__(self, db: Session):
        self.db = db

    def get(self) -> ReservationSettingsRead:
        return ReservationSettingsRead.model_validate(self._load())

    def update(self, partial: ReservationSettingsUpdate) -> ReservationSettingsRead:
        """
        Merge partial over the stored settings, validate, persist.

        Raises:
            ValidationError: listing every violated field.
        """
        row = self._load()
        current = _row_to_dict(row)
        merged = _merge(current, partial.model_dump(exclude_unset=True))

        errors = validate_policy(merged)
        if errors:
            logger.warning(f"Rejected settings update: {errors}")
            raise ValidationError(errors)

        if merged == current:
            return ReservationSettingsRead.model_validate(row)

        for field in _POLICY_FIELDS:
            setattr(row, field, merged[field])
        row.updated_at = func.now()

        self.db.commit()
        self.db.refresh(row)

        changed = sorted(f for f in _POLICY_FIELDS if merged[f] != current[f])
        logger.info(f"Reservation settings updated: {', '.join(changed)}")
        return ReservationSettingsRead.model_validate(row)

    # ── Helpers ──────────────────────────────────────────────────────────

    def _load(self) -> ReservationSettings:
        row = self.db.get(ReservationSettings, SETTINGS_ROW_ID)
        if row is not None:
            return row

        row = ReservationSettings(
            id=SETTINGS_ROW_ID,
            business_hours=default_business_hours(),
            default_duration=DEFAULT_DURATION_MINUTES,
            buffer_time=DEFAULT_BUFFER_MINUTES,
            max_advance_days=DEFAULT_MAX_ADVANCE_DAYS,
            allowed_services=list(DEFAULT_SERVICES),
            is_active=True,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created the row first
            self.db.rollback()
            logger.info("Default reservation settings already created, re-reading")
            return self.db.get(ReservationSettings, SETTINGS_ROW_ID)

        self.db.refresh(row)
        logger.info("Created default reservation settings")
        return row


def _row_to_dict(row: ReservationSettings) -> dict:
    return {
        "business_hours": {day: dict(hours) for day, hours in row.business_hours.items()},
        "default_duration": row.default_duration,
        "buffer_time": row.buffer_time,
        "max_advance_days": row.max_advance_days,
        "allowed_services": list(row.allowed_services),
        "is_active": bool(row.is_active),
    }


def _merge(current: dict, changes: dict) -> dict:
    merged = {
        **current,
        "business_hours": {day: dict(hours) for day, hours in current["business_hours"].items()},
    }

    for field, value in changes.items():
        if value is None:
            continue
        if field == "business_hours":
            # Per-day merge: days absent from the payload keep their hours
            merged["business_hours"].update(value)
        elif field == "allowed_services":
            merged["allowed_services"] = normalize_services(value)
        else:
            merged[field] = value

    return merged


def normalize_services(services: list[str]) -> list[str]:
    """Trim, drop blanks, de-duplicate keeping first occurrence."""
    result: list[str] = []
    for name in services:
        name = name.strip()
        if name and name not in result:
            result.append(name)
    return result


def validate_policy(values: dict) -> dict[str, str]:
    """
    Check a complete settings mapping.

    Returns:
        Mapping of field path → message. Empty = valid.
    """
    errors: dict[str, str] = {}

    hours: dict = values["business_hours"]
    unknown = sorted(set(hours) - set(WEEKDAYS))
    missing = [day for day in WEEKDAYS if day not in hours]
    if unknown:
        errors["businessHours"] = f"Unknown days: {', '.join(unknown)}"
    elif missing:
        errors["businessHours"] = f"Missing days: {', '.join(missing)}"

    for day in WEEKDAYS:
        day_hours: Optional[dict] = hours.get(day)
        if not day_hours or not day_hours["enabled"]:
            continue
        if time_str_to_minutes(day_hours["open"]) >= time_str_to_minutes(day_hours["close"]):
            errors[f"businessHours.{day}"] = "Opening time must be before closing time"

    if values["default_duration"] <= 0:
        errors["defaultDuration"] = "Must be greater than 0"
    elif values["default_duration"] > MAX_SLOT_MINUTES:
        errors["defaultDuration"] = f"Must be at most {MAX_SLOT_MINUTES}"
    if values["buffer_time"] < 0:
        errors["bufferTime"] = "Must be 0 or greater"
    elif values["buffer_time"] > MAX_SLOT_MINUTES:
        errors["bufferTime"] = f"Must be at most {MAX_SLOT_MINUTES}"
    if values["max_advance_days"] < 1:
        errors["maxAdvanceDays"] = "Must be at least 1"
    elif values["max_advance_days"] > MAX_ADVANCE_DAYS_LIMIT:
        errors["maxAdvanceDays"] = f"Must be at most {MAX_ADVANCE_DAYS_LIMIT}"

    return errors
