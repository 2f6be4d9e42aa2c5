"""
backend/scheduler/services/events.py

Booking notifier: pushes reservation events to a Redis queue for the mail
dispatcher.

Fire-and-forget. A failed push is logged and dropped; it never affects the
reservation that triggered it.
"""

import json
import logging
import time
from typing import Optional

from redis import Redis

from ..models import Reservation

logger = logging.getLogger(__name__)


class BookingNotifier:
    """Constructed once at startup and shared through app.state."""

    def __init__(self, redis: Optional[Redis], queue: str = "events:p2p"):
        self.redis = redis
        self.queue = queue

    def notify(self, event_type: str, reservation: Reservation) -> None:
        event = {
            "type": event_type,
            "reservation_id": reservation.id,
            "date": reservation.date,
            "time_slot": reservation.time_slot,
            "status": reservation.status,
            "email": reservation.email,
            "name": reservation.name,
            "ts": int(time.time()),
        }

        if self.redis is None:
            logger.debug(f"No Redis configured, dropping event {event_type}")
            return

        try:
            self.redis.rpush(self.queue, json.dumps(event))
            logger.info(f"Event emitted: {event_type} → {self.queue}")
        except Exception as e:
            logger.error(f"Failed to emit event {event_type}: {e}")

    def close(self) -> None:
        if self.redis is not None:
            self.redis.close()
