from workshop_booking_api.app.stores.interfaces import ReservationStore
from workshop_booking_api.app.stores.sqlite_store import SQLiteReservationStore

__all__ = [
    "ReservationStore",
    "SQLiteReservationStore",
]
