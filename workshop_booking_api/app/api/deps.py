"""
FastAPI dependencies that wire the services for one request.

Each request gets its own SQLite connection wrapped in a
``SQLiteReservationStore``; the connection is closed once the response
has been produced.
"""

from typing import Iterator

from fastapi import Depends, Request

from workshop_booking_api.app.core.config import Settings
from workshop_booking_api.app.core.db import Database
from workshop_booking_api.app.services.booking_service import BookingService
from workshop_booking_api.app.services.capacity_service import CapacityLedger
from workshop_booking_api.app.services.reservation_validator import ReservationValidator
from workshop_booking_api.app.services.waitlist_service import WaitlistService
from workshop_booking_api.app.stores.interfaces import ReservationStore
from workshop_booking_api.app.stores.sqlite_store import SQLiteReservationStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_store(database: Database = Depends(get_database)) -> Iterator[ReservationStore]:
    with database.connection() as conn:
        yield SQLiteReservationStore(conn)


def get_capacity_ledger(
    store: ReservationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CapacityLedger:
    return CapacityLedger(store, settings.max_tickets_per_booking)


def get_validator(
    ledger: CapacityLedger = Depends(get_capacity_ledger),
    store: ReservationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ReservationValidator:
    return ReservationValidator(store, ledger, settings.max_tickets_per_booking)


def get_booking_service(
    store: ReservationStore = Depends(get_store),
    validator: ReservationValidator = Depends(get_validator),
) -> BookingService:
    return BookingService(store, validator)


def get_waitlist_service(
    store: ReservationStore = Depends(get_store),
    validator: ReservationValidator = Depends(get_validator),
) -> WaitlistService:
    return WaitlistService(store, validator)
