"""
Validation of booking and waitlist requests.

The validator is the only gate keeping bookings within tier capacity,
so every commit must be preceded by ``validate_booking`` inside the
same store transaction.  Checks run in a fixed order and stop at the
first failure; each failure carries its own ``ErrorCode``.
"""

import re
from datetime import date, datetime, timezone
from typing import Callable, Optional

from workshop_booking_api.app.core.config import settings
from workshop_booking_api.app.core.errors import (
    CapacityExceededError,
    DuplicateWaitlistError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from workshop_booking_api.app.schemas.booking import BookingRequest, ValidatedBooking
from workshop_booking_api.app.schemas.event import TIER_LABELS, EventRead, EventStatus
from workshop_booking_api.app.schemas.waitlist import ValidatedWaitlistJoin, WaitlistJoin
from workshop_booking_api.app.services.capacity_service import CapacityLedger
from workshop_booking_api.app.stores.interfaces import ReservationStore

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_date(value: datetime) -> date:
    """Calendar date of ``value`` in the server's local time zone.

    Event dates are stored as naive local date-times and are taken as
    they are; aware values (such as the clock's) are converted first.
    """
    if value.tzinfo is None:
        return value.date()
    return value.astimezone().date()


def sanitize(value: Optional[str]) -> str:
    """Trim a form value and strip angle brackets."""
    if not value:
        return ""
    return value.replace("<", "").replace(">", "").strip()


def is_valid_email(email: str) -> bool:
    """True for ``local@domain.tld`` shaped strings, or an empty string."""
    if not email:
        return True
    return EMAIL_RE.match(email) is not None


class ReservationValidator:
    """Checks booking and waitlist requests against the current store state."""

    def __init__(
        self,
        store: ReservationStore,
        ledger: Optional[CapacityLedger] = None,
        max_per_booking: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._ledger = ledger or CapacityLedger(store, max_per_booking)
        if max_per_booking is None:
            max_per_booking = settings.max_tickets_per_booking
        self.max_per_booking = max_per_booking
        self._clock = clock

    async def validate_booking(self, event_id: int, request: BookingRequest) -> ValidatedBooking:
        """Validate a booking request and return it normalised.

        Raises
        ------
        ValidationError
            Name, email or quantities are invalid, or the event date has passed.
        NotFoundError
            The event does not exist or is not published.
        CapacityExceededError
            A tier has fewer remaining seats than requested.
        """
        name = sanitize(request.attendee_name)
        email = sanitize(request.attendee_email)
        notes = sanitize(request.dietary_notes)
        quantities = dict(request.quantities)

        self._check_name(name, max_length=NAME_MAX_LENGTH)
        if email and not is_valid_email(email):
            raise ValidationError(code=ErrorCode.INVALID_EMAIL, message="Invalid email format.", field="attendee_email")

        total = sum(quantities.values())
        if total < 1:
            raise ValidationError(
                code=ErrorCode.NO_SEATS_SELECTED,
                message="Please select at least one seat.",
                field="quantities",
            )
        if total > self.max_per_booking:
            raise ValidationError(
                code=ErrorCode.TOO_MANY_SEATS,
                message=f"Maximum {self.max_per_booking} seats per booking.",
                field="quantities",
            )
        if any(quantity < 0 for quantity in quantities.values()):
            raise ValidationError(
                code=ErrorCode.NEGATIVE_QUANTITY,
                message="Invalid seat quantity.",
                field="quantities",
            )

        event = self._get_published_event(event_id)
        if local_date(event.event_date) < local_date(self._clock()):
            raise ValidationError(
                code=ErrorCode.EVENT_PASSED,
                message="This workshop has already passed.",
                field="event_id",
            )

        remaining = await self._ledger.compute_remaining(event_id)
        for tier, quantity in quantities.items():
            if quantity > 0 and quantity > remaining.get(tier, 0):
                raise CapacityExceededError(tier=tier, requested=quantity, remaining=remaining.get(tier, 0))

        tiers = {tier.tier: tier for tier in self._store.list_ticket_tiers(event_id)}
        return ValidatedBooking(
            event=event,
            attendee_name=name,
            attendee_email=email or None,
            dietary_notes=notes or None,
            quantities={tier: quantity for tier, quantity in quantities.items() if quantity > 0},
            tiers=tiers,
        )

    async def validate_waitlist_join(self, event_id: int, join: WaitlistJoin) -> ValidatedWaitlistJoin:
        """Validate a waitlist request and return it normalised.

        Raises
        ------
        ValidationError
            Name, email, quantity or tier are invalid.
        NotFoundError
            The event does not exist or is not published.
        DuplicateWaitlistError
            The email already has a ``waiting`` entry for this event.
        """
        name = sanitize(join.attendee_name)
        email = sanitize(join.attendee_email)

        self._check_name(name)
        if not email:
            raise ValidationError(
                code=ErrorCode.EMAIL_REQUIRED,
                message="Valid email is required for waitlist notification.",
                field="attendee_email",
            )
        if not is_valid_email(email):
            raise ValidationError(
                code=ErrorCode.INVALID_EMAIL,
                message="Valid email is required for waitlist notification.",
                field="attendee_email",
            )
        if join.quantity < 1 or join.quantity > self.max_per_booking:
            raise ValidationError(
                code=ErrorCode.INVALID_QUANTITY,
                message=f"Quantity must be between 1 and {self.max_per_booking}.",
                field="quantity",
            )
        if join.ticket_type not in TIER_LABELS:
            raise ValidationError(
                code=ErrorCode.INVALID_TIER,
                message=f"Ticket type must be one of: {', '.join(TIER_LABELS)}.",
                field="ticket_type",
            )

        event = self._get_published_event(event_id)
        if self._store.find_waiting_entry(event_id, email) is not None:
            raise DuplicateWaitlistError(event_id=event_id, email=email)

        return ValidatedWaitlistJoin(
            event=event,
            attendee_name=name,
            attendee_email=email,
            tier=join.ticket_type,
            quantity=join.quantity,
        )

    def _check_name(self, name: str, max_length: Optional[int] = None) -> None:
        if not name:
            raise ValidationError(code=ErrorCode.NAME_REQUIRED, message="Name is required.", field="attendee_name")
        if len(name) < NAME_MIN_LENGTH or (max_length is not None and len(name) > max_length):
            limit = f"{NAME_MIN_LENGTH} to {max_length}" if max_length else f"at least {NAME_MIN_LENGTH}"
            raise ValidationError(
                code=ErrorCode.NAME_LENGTH,
                message=f"Name must be {limit} characters.",
                field="attendee_name",
            )

    def _get_published_event(self, event_id: int) -> EventRead:
        event = self._store.get_event(event_id)
        if event is None or event.status != EventStatus.PUBLISHED:
            raise NotFoundError(
                code=ErrorCode.EVENT_NOT_FOUND,
                message="Workshop not found or not available.",
                field="event_id",
            )
        return event
