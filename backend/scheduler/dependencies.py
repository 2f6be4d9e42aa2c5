# backend/scheduler/dependencies.py
"""
FastAPI dependency wiring.

Long-lived collaborators (clock, notifier, settings) are built once in the
application lifespan and read from app.state; per-request services share the
request's database session.
"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from .database import get_db
from .services.booking import BookingService
from .services.clock import BusinessClock
from .services.events import BookingNotifier
from .services.repository import ReservationRepository
from .services.settings_store import SettingsStore
from .services.slots import AvailabilityService

logger = logging.getLogger(__name__)


def get_clock(request: Request) -> BusinessClock:
    return request.app.state.clock


def get_notifier(request: Request) -> BookingNotifier:
    return request.app.state.notifier


def get_settings_store(db: Session = Depends(get_db)) -> SettingsStore:
    return SettingsStore(db)


def get_repository(db: Session = Depends(get_db)) -> ReservationRepository:
    return ReservationRepository(db)


def get_availability_service(
    store: SettingsStore = Depends(get_settings_store),
    repository: ReservationRepository = Depends(get_repository),
    clock: BusinessClock = Depends(get_clock),
) -> AvailabilityService:
    return AvailabilityService(store, repository, clock)


def get_booking_service(
    store: SettingsStore = Depends(get_settings_store),
    repository: ReservationRepository = Depends(get_repository),
    clock: BusinessClock = Depends(get_clock),
    notifier: BookingNotifier = Depends(get_notifier),
) -> BookingService:
    return BookingService(repository, store, clock, notifier)


def require_admin(
    request: Request,
    x_admin_token: Optional[str] = Header(None),
) -> None:
    """Gate for administrative endpoints (X-Admin-Token header)."""
    expected = request.app.state.settings.admin_api_token
    if not expected or not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), expected.encode()
    ):
        logger.warning(f"Rejected admin call: {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin authentication required",
        )
