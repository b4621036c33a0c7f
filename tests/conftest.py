"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

import pytest
from fastapi.testclient import TestClient

from workshop_booking_api.app.core.config import Settings
from workshop_booking_api.app.core.db import Database
from workshop_booking_api.app.main import create_app
from workshop_booking_api.app.services.booking_service import BookingService
from workshop_booking_api.app.services.capacity_service import CapacityLedger
from workshop_booking_api.app.services.reservation_validator import ReservationValidator
from workshop_booking_api.app.services.waitlist_service import WaitlistService
from workshop_booking_api.app.stores.sqlite_store import SQLiteReservationStore

FUTURE_DATE = "2099-06-01T18:00:00"
PAST_DATE = "2020-01-15T18:00:00"


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


def create_event(
    database: Database,
    title: str = "Fresh Pasta Masterclass",
    event_date: str = FUTURE_DATE,
    status: str = "published",
    tiers: Optional[dict[str, tuple[int, float]]] = None,
) -> int:
    """Insert an event and its tiers the way the organiser dashboard does."""
    if tiers is None:
        tiers = {"full": (2, 10.0), "concession": (1, 5.0)}
    now = "2026-01-01T09:00:00"
    with database.connection() as conn:
        cursor = conn.execute(
            """
            INSERT INTO events (title, description, event_date, created_at, updated_at, published_at, status)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (title, "Hands-on workshop", event_date, now, now, now if status == "published" else None, status),
        )
        event_id = cursor.lastrowid
        for tier, (quantity, price) in tiers.items():
            conn.execute(
                "INSERT INTO tickets (event_id, type, quantity, price) VALUES (?, ?, ?, ?)",
                (event_id, tier, quantity, price),
            )
    return event_id


@pytest.fixture
def database(tmp_path) -> Database:
    db = Database(str(tmp_path / "workshops.db"), busy_timeout=5.0)
    db.init_db()
    return db


@pytest.fixture
def store(database: Database) -> Iterator[SQLiteReservationStore]:
    with database.connection() as conn:
        yield SQLiteReservationStore(conn)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(store) -> CapacityLedger:
    return CapacityLedger(store, max_per_booking=10)


@pytest.fixture
def validator(store, ledger, clock) -> ReservationValidator:
    return ReservationValidator(store, ledger, max_per_booking=10, clock=clock)


@pytest.fixture
def booking_service(store, validator, clock) -> BookingService:
    return BookingService(store, validator, clock=clock)


@pytest.fixture
def waitlist_service(store, validator, clock) -> WaitlistService:
    return WaitlistService(store, validator, clock=clock)


@pytest.fixture
def event_id(database) -> int:
    """Event E: ``full`` 2 seats at 10.00, ``concession`` 1 seat at 5.00."""
    return create_event(database)


@pytest.fixture
def api_client(database) -> Iterator[TestClient]:
    settings = Settings(database_url=database.path, max_tickets_per_booking=10)
    app = create_app(settings=settings, database=database)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_event(database):
    """Factory fixture: ``make_event(title=..., event_date=..., status=..., tiers=...)``."""

    def _make(**kwargs) -> int:
        return create_event(database, **kwargs)

    return _make
