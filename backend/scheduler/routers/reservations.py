# backend/scheduler/routers/reservations.py
"""
Reservations API.

Public:  GET /reservations/available-slots/{date}, POST /reservations
Admin:   list / read / edit, status transitions
DELETE = 405 (reservations are never physically deleted)
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..dependencies import (
    get_availability_service,
    get_booking_service,
    get_repository,
    require_admin,
)
from ..models import ReservationStatus
from ..schemas.reservations import (
    AvailableSlotsResponse,
    ReservationCancel,
    ReservationCreate,
    ReservationRead,
    ReservationUpdate,
)
from ..services.booking import BookingService
from ..services.repository import ReservationRepository
from ..services.slots import AvailabilityService

router = APIRouter(prefix="/reservations", tags=["reservations"])

admin_only = [Depends(require_admin)]


@router.get("/available-slots/{slot_date}", response_model=AvailableSlotsResponse)
def get_available_slots(
    slot_date: date,
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Free slot starts for a day (advisory; booking re-checks on commit)."""
    return AvailableSlotsResponse(
        date=slot_date,
        available_slots=availability.available_slots(slot_date),
        business_hours=availability.day_hours(slot_date),
    )


@router.post("", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
def create_reservation(
    data: ReservationCreate,
    booking: BookingService = Depends(get_booking_service),
):
    return booking.create_reservation(data)


@router.get("", response_model=list[ReservationRead], dependencies=admin_only)
def list_reservations(
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    target_date: Optional[date] = Query(None, alias="date"),
    repository: ReservationRepository = Depends(get_repository),
):
    return repository.list_all(
        status=status_filter.value if status_filter else None,
        target_date=target_date,
    )


@router.get("/{reservation_id}", response_model=ReservationRead, dependencies=admin_only)
def get_reservation(
    reservation_id: int,
    booking: BookingService = Depends(get_booking_service),
):
    return booking.get(reservation_id)


@router.put("/{reservation_id}", response_model=ReservationRead, dependencies=admin_only)
def update_reservation(
    reservation_id: int,
    data: ReservationUpdate,
    booking: BookingService = Depends(get_booking_service),
):
    return booking.update_details(reservation_id, data.model_dump(exclude_unset=True))


@router.put("/{reservation_id}/cancel", response_model=ReservationRead, dependencies=admin_only)
def cancel_reservation(
    reservation_id: int,
    data: Optional[ReservationCancel] = None,
    booking: BookingService = Depends(get_booking_service),
):
    return booking.cancel(reservation_id, reason=data.reason if data else None)


@router.put("/{reservation_id}/confirm", response_model=ReservationRead, dependencies=admin_only)
def confirm_reservation(
    reservation_id: int,
    booking: BookingService = Depends(get_booking_service),
):
    return booking.confirm(reservation_id)


@router.put("/{reservation_id}/complete", response_model=ReservationRead, dependencies=admin_only)
def complete_reservation(
    reservation_id: int,
    booking: BookingService = Depends(get_booking_service),
):
    return booking.complete(reservation_id)


@router.delete("/{reservation_id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
