"""Shared test fixtures and helpers."""

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from scheduler.config import Settings
from scheduler.database import create_db_engine, create_session_factory, init_db
from scheduler.main import create_app
from scheduler.schemas.reservation_settings import ReservationSettingsRead
from scheduler.schemas.reservations import ReservationCreate
from scheduler.services.booking import BookingService
from scheduler.services.repository import ReservationRepository
from scheduler.services.settings_store import SettingsStore
from scheduler.services.slots import AvailabilityService
from scheduler.services.slots.config import DEFAULT_SERVICES, default_business_hours

# Monday 2 March 2026, 10:30 business time
NOW = datetime(2026, 3, 2, 10, 30)
TODAY = NOW.date()
NEXT_MONDAY = date(2026, 3, 9)
SATURDAY = date(2026, 3, 7)

# 09:00-18:00, 60 min + 15 min buffer
DEFAULT_GRID = ["09:00", "10:15", "11:30", "12:45", "14:00", "15:15", "16:30"]

ADMIN_TOKEN = "test-admin-token"
ADMIN_HEADERS = {"X-Admin-Token": ADMIN_TOKEN}


class FixedClock:
    def __init__(self, now: datetime = NOW):
        self.current = now

    def now(self) -> datetime:
        return self.current


class RecordingNotifier:
    def __init__(self):
        self.events: list[tuple[str, int]] = []

    def notify(self, event_type, reservation) -> None:
        self.events.append((event_type, reservation.id))


def make_settings(**overrides) -> ReservationSettingsRead:
    """Helper to build scheduling settings with sensible defaults."""
    values = {
        "business_hours": default_business_hours(),
        "default_duration": 60,
        "buffer_time": 15,
        "max_advance_days": 30,
        "allowed_services": list(DEFAULT_SERVICES),
        "is_active": True,
    }
    values.update(overrides)
    return ReservationSettingsRead.model_validate(values)


def make_booking(
    target_date: date = NEXT_MONDAY,
    time_slot: str = "10:15",
    name: str = "Ana García",
    email: str = "ana@example.com",
    **kwargs,
) -> ReservationCreate:
    """Helper to create a ReservationCreate payload."""
    return ReservationCreate(
        name=name,
        email=email,
        date=target_date,
        time_slot=time_slot,
        **kwargs,
    )


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'reservations.db'}"


@pytest.fixture
def engine(database_url):
    engine = create_db_engine(database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return SettingsStore(db)


@pytest.fixture
def repository(db):
    return ReservationRepository(db)


@pytest.fixture
def availability(store, repository, clock):
    return AvailabilityService(store, repository, clock)


@pytest.fixture
def booking(repository, store, clock, notifier):
    return BookingService(repository, store, clock, notifier)


@pytest.fixture
def client(database_url, clock, notifier):
    settings = Settings(
        database_url=database_url,
        redis_url=None,
        admin_api_token=ADMIN_TOKEN,
    )
    app = create_app(settings, notifier=notifier, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
