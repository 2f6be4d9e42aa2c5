# backend/scheduler/routers/reservation_settings.py
# PUT = admin

from fastapi import APIRouter, Depends

from ..dependencies import get_settings_store, require_admin
from ..schemas.reservation_settings import (
    ReservationSettingsRead,
    ReservationSettingsUpdate,
)
from ..services.settings_store import SettingsStore

router = APIRouter(prefix="/reservation-settings", tags=["reservation_settings"])


@router.get("", response_model=ReservationSettingsRead)
def get_reservation_settings(store: SettingsStore = Depends(get_settings_store)):
    return store.get()


@router.put(
    "",
    response_model=ReservationSettingsRead,
    dependencies=[Depends(require_admin)],
)
def update_reservation_settings(
    data: ReservationSettingsUpdate,
    store: SettingsStore = Depends(get_settings_store),
):
    return store.update(data)
