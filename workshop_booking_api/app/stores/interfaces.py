"""Store interfaces (repository pattern).

Services depend only on ``ReservationStore``; the SQLite implementation
lives in ``sqlite_store``.  Stores return schema objects, never raw rows.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Optional

from workshop_booking_api.app.schemas.booking import BookingRead
from workshop_booking_api.app.schemas.event import EventRead, TicketTierRead
from workshop_booking_api.app.schemas.waitlist import WaitlistEntryRead, WaitlistStatus


class ReservationStore(ABC):
    """Interface for the data the booking core reads and writes."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Run the enclosed calls as one serialised unit of work.

        Nested use joins the outer unit.  Any exception rolls back all
        writes made inside it.
        """
        ...

    # Events and tiers (read only)

    @abstractmethod
    def get_event(self, event_id: int) -> Optional[EventRead]:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def list_ticket_tiers(self, event_id: int) -> list[TicketTierRead]:
        """Return the configured tiers of an event."""
        ...

    # Bookings

    @abstractmethod
    def booked_quantities(self, event_id: int) -> dict[str, int]:
        """Return the summed booked quantity per tier label."""
        ...

    @abstractmethod
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
        """Insert one booking row and return its ID."""
        ...

    @abstractmethod
    def list_bookings(self, event_id: int, reservation_id: Optional[str] = None) -> list[BookingRead]:
        """Return bookings of an event ordered by booking date, then ID."""
        ...

    # Waitlist

    @abstractmethod
    def insert_waitlist_entry(
        self,
        event_id: int,
        attendee_name: str,
        attendee_email: str,
        tier: str,
        quantity: int,
        requested_at: datetime,
    ) -> int:
        """Insert a ``waiting`` entry and return its ID."""
        ...

    @abstractmethod
    def get_waitlist_entry(self, entry_id: int) -> Optional[WaitlistEntryRead]:
        """Return a waitlist entry by ID, or None if not found."""
        ...

    @abstractmethod
    def find_waiting_entry(self, event_id: int, email: str) -> Optional[WaitlistEntryRead]:
        """Return the ``waiting`` entry of an email for an event, if any."""
        ...

    @abstractmethod
    def count_waiting(self, event_id: int, requested_until: Optional[datetime] = None) -> int:
        """Count ``waiting`` entries, optionally only those requested no later than a time."""
        ...

    @abstractmethod
    def list_waiting_entries(self, event_id: Optional[int] = None) -> list[WaitlistEntryRead]:
        """Return ``waiting`` entries with event title and date filled in.

        Ordered by event date, event ID, request time, then entry ID.
        """
        ...

    @abstractmethod
    def close_waitlist_entry(
        self,
        entry_id: int,
        status: WaitlistStatus,
        notified_at: Optional[datetime] = None,
    ) -> bool:
        """Move a ``waiting`` entry to ``status``.

        Returns False when the entry was not ``waiting`` (or missing).
        """
        ...
