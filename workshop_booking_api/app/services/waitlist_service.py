"""
Business logic for the workshop waitlist.

Attendees queue per event in the order they asked (``requested_at``,
then entry ID).  An entry leaves the queue when the organiser marks it
``notified`` or ``removed``; neither step creates a booking, the
attendee books through the normal form once contacted.

Two positions exist and can disagree:

* ``join`` reports how many waiting entries were requested no later
  than the new one.  Entries sharing a timestamp all count each other.
* ``list_waiting`` ranks the current queue (1, 2, 3, ...) at read time.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from workshop_booking_api.app.core.errors import (
    DomainError,
    ErrorCode,
    InvalidTransitionError,
    NotFoundError,
)
from workshop_booking_api.app.schemas.waitlist import (
    WaitlistEntryRead,
    WaitlistJoin,
    WaitlistReceipt,
    WaitlistStatus,
    WaitlistStatusRead,
)
from workshop_booking_api.app.services.reservation_validator import ReservationValidator, sanitize, utc_now
from workshop_booking_api.app.stores.interfaces import ReservationStore

logger = logging.getLogger(__name__)


class WaitlistService:
    """Service for joining, listing and closing waitlist entries."""

    def __init__(
        self,
        store: ReservationStore,
        validator: Optional[ReservationValidator] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._validator = validator or ReservationValidator(store, clock=clock)
        self._clock = clock

    async def join(self, event_id: int, join: WaitlistJoin) -> WaitlistReceipt:
        """Add an attendee to an event's waitlist.

        The duplicate check, insert and position count run in one
        transaction.

        Raises
        ------
        ValidationError, NotFoundError, DuplicateWaitlistError
            See ``ReservationValidator.validate_waitlist_join``.
        """
        try:
            with self._store.atomic():
                validated = await self._validator.validate_waitlist_join(event_id, join)
                requested_at = self._clock()
                entry_id = self._store.insert_waitlist_entry(
                    event_id=event_id,
                    attendee_name=validated.attendee_name,
                    attendee_email=validated.attendee_email,
                    tier=validated.tier,
                    quantity=validated.quantity,
                    requested_at=requested_at,
                )
                position = self._store.count_waiting(event_id, requested_until=requested_at)
                entry = self._store.get_waitlist_entry(entry_id)
        except DomainError as exc:
            logger.info("Waitlist join for event %s rejected: %s", event_id, exc)
            raise

        logger.info(
            "Waitlist entry %s added for event %s (%s x%s) at position %s",
            entry_id,
            event_id,
            validated.tier,
            validated.quantity,
            position,
        )
        return WaitlistReceipt(entry=entry, position=position)

    async def list_waiting(self, event_id: Optional[int] = None) -> List[WaitlistEntryRead]:
        """Return waiting entries grouped by event with 1-based positions.

        Events are ordered by date; within an event entries keep request
        order and ``position`` restarts at 1.
        """
        entries = self._store.list_waiting_entries(event_id)
        ranked: List[WaitlistEntryRead] = []
        current_event: Optional[int] = None
        position = 0
        for entry in entries:
            if entry.event_id != current_event:
                current_event = entry.event_id
                position = 0
            position += 1
            ranked.append(entry.model_copy(update={"position": position}))
        return ranked

    async def get_entry(self, entry_id: int) -> WaitlistEntryRead:
        entry = self._store.get_waitlist_entry(entry_id)
        if entry is None:
            raise NotFoundError(
                code=ErrorCode.WAITLIST_ENTRY_NOT_FOUND,
                message=f"Waitlist entry {entry_id} not found.",
                field="entry_id",
            )
        return entry

    async def status(self, event_id: int, email: str) -> WaitlistStatusRead:
        """Report whether an email is waiting for an event, and where."""
        entry = self._store.find_waiting_entry(event_id, sanitize(email))
        if entry is None:
            return WaitlistStatusRead(on_waitlist=False)
        return WaitlistStatusRead(
            on_waitlist=True,
            position=self._store.count_waiting(event_id, requested_until=entry.requested_at),
            event_title=entry.event_title,
            tier=entry.tier,
            quantity=entry.quantity,
            requested_at=entry.requested_at,
        )

    async def mark_notified(self, entry_id: int) -> WaitlistEntryRead:
        """Mark a waiting entry as contacted by the organiser.

        Raises
        ------
        NotFoundError
            If the entry does not exist.
        InvalidTransitionError
            If the entry is already ``notified`` or ``removed``.
        """
        return await self._close(entry_id, WaitlistStatus.NOTIFIED, notified_at=self._clock())

    async def remove(self, entry_id: int) -> WaitlistEntryRead:
        """Take a waiting entry off the queue.

        Raises
        ------
        NotFoundError
            If the entry does not exist.
        InvalidTransitionError
            If the entry is already ``notified`` or ``removed``.
        """
        return await self._close(entry_id, WaitlistStatus.REMOVED)

    async def _close(
        self,
        entry_id: int,
        status: WaitlistStatus,
        notified_at: Optional[datetime] = None,
    ) -> WaitlistEntryRead:
        with self._store.atomic():
            entry = await self.get_entry(entry_id)
            if not self._store.close_waitlist_entry(entry_id, status, notified_at=notified_at):
                raise InvalidTransitionError(entry_id=entry_id, status=entry.status.value)
            updated = self._store.get_waitlist_entry(entry_id)
        logger.info("Waitlist entry %s for event %s marked %s", entry_id, entry.event_id, status.value)
        return updated
