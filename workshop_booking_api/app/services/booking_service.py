"""
Business logic for committing bookings.

A booking request may cover both tiers; each tier with seats becomes
its own row in ``bookings``.  All rows of one request share a
``reservation_id`` and ``booking_date`` and are written in a single
transaction, so a failure leaves no partial reservation behind.

``reserve`` is the entry point for the booking form: it validates and
commits under the store's write lock, which keeps two concurrent
requests from both passing the capacity check on the same snapshot.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from workshop_booking_api.app.core.errors import DomainError, ErrorCode, NotFoundError
from workshop_booking_api.app.schemas.booking import (
    BookingLine,
    BookingRead,
    BookingReceipt,
    BookingRequest,
    ValidatedBooking,
)
from workshop_booking_api.app.services.reservation_validator import ReservationValidator, utc_now
from workshop_booking_api.app.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


class BookingService:
    """Service for validating, committing and reading back bookings."""

    def __init__(
        self,
        store: ReservationStore,
        validator: Optional[ReservationValidator] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._validator = validator or ReservationValidator(store, clock=clock)
        self._clock = clock

    async def validate_booking(self, event_id: int, request: BookingRequest) -> ValidatedBooking:
        return await self._validator.validate_booking(event_id, request)

    async def commit_booking(self, booking: ValidatedBooking) -> BookingReceipt:
        """Persist a validated booking and return its receipt.

        One row is inserted per tier with seats; all rows share the same
        ``reservation_id`` and ``booking_date``.  The inserts run in one
        transaction (joining the caller's, if any).

        Raises
        ------
        PersistenceError
            If the store fails; no rows of this booking are kept.
        """
        reservation_id = uuid.uuid4().hex
        booked_at = self._clock()
        event_id = booking.event.id

        with self._store.atomic():
            for tier, quantity in booking.quantities.items():
                self._store.insert_booking(
                    event_id=event_id,
                    reservation_id=reservation_id,
                    tier=tier,
                    quantity=quantity,
                    attendee_name=booking.attendee_name,
                    attendee_email=booking.attendee_email,
                    dietary_notes=booking.dietary_notes,
                    booking_date=booked_at,
                )

        lines = [
            BookingLine(tier=tier, quantity=quantity, unit_price=booking.tiers[tier].price)
            for tier, quantity in booking.quantities.items()
        ]
        logger.info(
            "Reservation %s committed for event %s: %s seats (%s)",
            reservation_id,
            event_id,
            booking.total_quantity,
            ", ".join(f"{line.tier}={line.quantity}" for line in lines),
        )
        return BookingReceipt(
            reservation_id=reservation_id,
            event_id=event_id,
            event_title=booking.event.title,
            attendee_name=booking.attendee_name,
            attendee_email=booking.attendee_email,
            lines=lines,
            total_quantity=booking.total_quantity,
            total_price=sum(line.subtotal for line in lines),
            booking_date=booked_at,
        )

    async def reserve(self, event_id: int, request: BookingRequest) -> BookingReceipt:
        """Validate and commit a booking request as one unit of work."""
        try:
            with self._store.atomic():
                validated = await self._validator.validate_booking(event_id, request)
                return await self.commit_booking(validated)
        except DomainError as exc:
            logger.info("Booking for event %s rejected: %s", event_id, exc)
            raise

    async def get_confirmation(self, event_id: int, reservation_id: str) -> BookingReceipt:
        """Rebuild the receipt of a committed reservation.

        Prices come from the event's current tier configuration.

        Raises
        ------
        NotFoundError
            If the reservation does not exist for this event.
        """
        event = self._store.get_event(event_id)
        rows = self._store.list_bookings(event_id, reservation_id=reservation_id) if event else []
        if not rows:
            raise NotFoundError(
                code=ErrorCode.RESERVATION_NOT_FOUND,
                message="No reservations found.",
                field="reservation_id",
            )

        prices = {tier.tier: tier.price for tier in self._store.list_ticket_tiers(event_id)}
        lines = [BookingLine(tier=row.tier, quantity=row.quantity, unit_price=prices.get(row.tier, 0.0)) for row in rows]
        first = rows[0]
        return BookingReceipt(
            reservation_id=reservation_id,
            event_id=event_id,
            event_title=event.title,
            attendee_name=first.attendee_name,
            attendee_email=first.attendee_email,
            lines=lines,
            total_quantity=sum(line.quantity for line in lines),
            total_price=sum(line.subtotal for line in lines),
            booking_date=first.booking_date,
        )

    async def list_bookings(self, event_id: int) -> List[BookingRead]:
        """List all booking rows of an event, oldest first.

        Raises
        ------
        NotFoundError
            If the event does not exist.
        """
        if self._store.get_event(event_id) is None:
            raise NotFoundError(code=ErrorCode.EVENT_NOT_FOUND, message="Workshop not found.", field="event_id")
        return self._store.list_bookings(event_id)
