# backend/scheduler/services/slots/__init__.py
"""
Slots calculation module.

Generator: candidate grid from business hours (pure, no I/O)
Availability: grid minus occupied slots (reads reservations)
"""

from .availability import AvailabilityService
from .generator import TimeSlot, generate_slots, slot_starts

__all__ = [
    "AvailabilityService",
    "TimeSlot",
    "generate_slots",
    "slot_starts",
]
