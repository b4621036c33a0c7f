"""SQLite implementation of the ReservationStore.

The store is bound to one connection (opened in autocommit mode by
``core.db.Database``).  ``atomic()`` takes SQLite's write lock with
``BEGIN IMMEDIATE`` so a capacity check and the inserts that depend on
it cannot interleave with another writer.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional, Sequence

from workshop_booking_api.app.core.errors import PersistenceError
from workshop_booking_api.app.schemas.booking import BookingRead
from workshop_booking_api.app.schemas.event import EventRead, TicketTierRead
from workshop_booking_api.app.schemas.waitlist import WaitlistEntryRead, WaitlistStatus
from workshop_booking_api.app.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime) -> str:
    """Serialise a timestamp so that text order matches time order."""
    return value.isoformat(timespec="microseconds")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


class SQLiteReservationStore(ReservationStore):
    """SQLite-backed reservation store."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            logger.exception("Database statement failed: %s", sql.split("\n", 1)[0].strip() or sql)
            raise PersistenceError() from exc

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._conn.in_transaction:
            yield
            return
        self._execute("BEGIN IMMEDIATE")
        try:
            yield
        except BaseException:
            self._conn.rollback()
            raise
        else:
            try:
                self._conn.commit()
            except sqlite3.Error as exc:
                logger.exception("Commit failed")
                self._conn.rollback()
                raise PersistenceError() from exc

    # Events and tiers

    def get_event(self, event_id: int) -> Optional[EventRead]:
        row = self._execute(
            """
            SELECT event_id, title, description, event_date, status, category_id,
                   created_at, updated_at, published_at
            FROM events WHERE event_id = ?
            """,
            (event_id,),
        ).fetchone()
        if not row:
            return None
        return EventRead(
            id=row["event_id"],
            title=row["title"],
            description=row["description"],
            event_date=parse_timestamp(row["event_date"]),
            status=row["status"] or "draft",
            category_id=row["category_id"],
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
            published_at=parse_timestamp(row["published_at"]),
        )

    def list_ticket_tiers(self, event_id: int) -> list[TicketTierRead]:
        rows = self._execute(
            "SELECT event_id, type, quantity, price FROM tickets WHERE event_id = ? ORDER BY ticket_id",
            (event_id,),
        ).fetchall()
        return [
            TicketTierRead(event_id=row["event_id"], tier=row["type"], quantity=row["quantity"], price=row["price"])
            for row in rows
        ]

    # Bookings

    def booked_quantities(self, event_id: int) -> dict[str, int]:
        rows = self._execute(
            """
            SELECT ticket_type, SUM(quantity) AS booked
            FROM bookings WHERE event_id = ? GROUP BY ticket_type
            """,
            (event_id,),
        ).fetchall()
        return {row["ticket_type"]: int(row["booked"] or 0) for row in rows}

    def insert_booking(
        self,
        event_id: int,
        reservation_id: str,
        tier: str,
        quantity: int,
        attendee_name: str,
        attendee_email: Optional[str],
        dietary_notes: Optional[str],
        booking_date: datetime,
    ) -> int:
        cursor = self._execute(
            """
            INSERT INTO bookings
                (event_id, reservation_id, attendee_name, attendee_email, ticket_type,
                 quantity, booking_date, dietary_notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event_id,
                reservation_id,
                attendee_name,
                attendee_email,
                tier,
                quantity,
                format_timestamp(booking_date),
                dietary_notes,
            ),
        )
        return cursor.lastrowid

    def list_bookings(self, event_id: int, reservation_id: Optional[str] = None) -> list[BookingRead]:
        query = (
            "SELECT booking_id, event_id, reservation_id, attendee_name, attendee_email, ticket_type, "
            "quantity, booking_date, dietary_notes FROM bookings WHERE event_id = ?"
        )
        params: list = [event_id]
        if reservation_id is not None:
            query += " AND reservation_id = ?"
            params.append(reservation_id)
        query += " ORDER BY booking_date ASC, booking_id ASC"
        rows = self._execute(query, params).fetchall()
        return [
            BookingRead(
                id=row["booking_id"],
                event_id=row["event_id"],
                reservation_id=row["reservation_id"],
                attendee_name=row["attendee_name"],
                attendee_email=row["attendee_email"],
                tier=row["ticket_type"],
                quantity=row["quantity"],
                booking_date=parse_timestamp(row["booking_date"]),
                dietary_notes=row["dietary_notes"],
            )
            for row in rows
        ]

    # Waitlist

    _WAITLIST_COLUMNS = (
        "w.waitlist_id, w.event_id, w.attendee_name, w.attendee_email, w.ticket_type, "
        "w.quantity, w.requested_at, w.status, w.notified_at"
    )

    @staticmethod
    def _entry_from_row(row: sqlite3.Row, **extra: Any) -> WaitlistEntryRead:
        return WaitlistEntryRead(
            id=row["waitlist_id"],
            event_id=row["event_id"],
            attendee_name=row["attendee_name"],
            attendee_email=row["attendee_email"],
            tier=row["ticket_type"],
            quantity=row["quantity"],
            requested_at=parse_timestamp(row["requested_at"]),
            status=row["status"] or WaitlistStatus.WAITING.value,
            notified_at=parse_timestamp(row["notified_at"]),
            **extra,
        )

    def insert_waitlist_entry(
        self,
        event_id: int,
        attendee_name: str,
        attendee_email: str,
        tier: str,
        quantity: int,
        requested_at: datetime,
    ) -> int:
        cursor = self._execute(
            """
            INSERT INTO waitlist
                (event_id, attendee_name, attendee_email, ticket_type, quantity, requested_at, status)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event_id,
                attendee_name,
                attendee_email,
                tier,
                quantity,
                format_timestamp(requested_at),
                WaitlistStatus.WAITING.value,
            ),
        )
        return cursor.lastrowid

    def get_waitlist_entry(self, entry_id: int) -> Optional[WaitlistEntryRead]:
        row = self._execute(
            f"""
            SELECT {self._WAITLIST_COLUMNS}, e.title AS event_title, e.event_date AS event_date
            FROM waitlist w JOIN events e ON w.event_id = e.event_id
            WHERE w.waitlist_id = ?
            """,
            (entry_id,),
        ).fetchone()
        if not row:
            return None
        return self._entry_from_row(
            row, event_title=row["event_title"], event_date=parse_timestamp(row["event_date"])
        )

    def find_waiting_entry(self, event_id: int, email: str) -> Optional[WaitlistEntryRead]:
        row = self._execute(
            f"""
            SELECT {self._WAITLIST_COLUMNS}, e.title AS event_title, e.event_date AS event_date
            FROM waitlist w JOIN events e ON w.event_id = e.event_id
            WHERE w.event_id = ? AND w.attendee_email = ? AND w.status = ?
            ORDER BY w.requested_at ASC, w.waitlist_id ASC
            """,
            (event_id, email, WaitlistStatus.WAITING.value),
        ).fetchone()
        if not row:
            return None
        return self._entry_from_row(
            row, event_title=row["event_title"], event_date=parse_timestamp(row["event_date"])
        )

    def count_waiting(self, event_id: int, requested_until: Optional[datetime] = None) -> int:
        query = "SELECT COUNT(*) AS total FROM waitlist WHERE event_id = ? AND status = ?"
        params: list = [event_id, WaitlistStatus.WAITING.value]
        if requested_until is not None:
            query += " AND requested_at <= ?"
            params.append(format_timestamp(requested_until))
        row = self._execute(query, params).fetchone()
        return int(row["total"]) if row else 0

    def list_waiting_entries(self, event_id: Optional[int] = None) -> list[WaitlistEntryRead]:
        query = (
            f"SELECT {self._WAITLIST_COLUMNS}, e.title AS event_title, e.event_date AS event_date "
            "FROM waitlist w JOIN events e ON w.event_id = e.event_id WHERE w.status = ?"
        )
        params: list = [WaitlistStatus.WAITING.value]
        if event_id is not None:
            query += " AND w.event_id = ?"
            params.append(event_id)
        query += " ORDER BY e.event_date ASC, e.event_id ASC, w.requested_at ASC, w.waitlist_id ASC"
        rows = self._execute(query, params).fetchall()
        return [
            self._entry_from_row(row, event_title=row["event_title"], event_date=parse_timestamp(row["event_date"]))
            for row in rows
        ]

    def close_waitlist_entry(
        self,
        entry_id: int,
        status: WaitlistStatus,
        notified_at: Optional[datetime] = None,
    ) -> bool:
        cursor = self._execute(
            """
            UPDATE waitlist SET status = ?, notified_at = COALESCE(?, notified_at)
            WHERE waitlist_id = ? AND status = ?
            """,
            (
                status.value,
                format_timestamp(notified_at) if notified_at else None,
                entry_id,
                WaitlistStatus.WAITING.value,
            ),
        )
        return cursor.rowcount == 1
