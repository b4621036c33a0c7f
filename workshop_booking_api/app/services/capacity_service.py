"""
Seat availability per ticket tier.

Remaining seats are derived, never stored: the configured quantity of a
tier minus the sum of all bookings made for it.  Results are a snapshot
of the store at read time; callers that act on them (the booking
service) take the store's write lock first.
"""

from typing import Optional

from workshop_booking_api.app.core.config import settings
from workshop_booking_api.app.core.errors import ErrorCode, NotFoundError
from workshop_booking_api.app.schemas.event import AvailabilityRead, EventStatus, TierAvailability
from workshop_booking_api.app.stores.interfaces import ReservationStore


class CapacityLedger:
    """Computes remaining seats for an event's ticket tiers."""

    def __init__(self, store: ReservationStore, max_per_booking: Optional[int] = None) -> None:
        self._store = store
        if max_per_booking is None:
            max_per_booking = settings.max_tickets_per_booking
        self.max_per_booking = max_per_booking

    async def compute_remaining(self, event_id: int, clamp: bool = False) -> dict[str, int]:
        """Return remaining seats per configured tier label.

        With ``clamp=False`` (used for validation) the raw difference is
        returned, which would only be negative if the store had been
        oversold.  ``clamp=True`` floors every tier at zero for display.
        Tiers with no configured row do not appear; treat them as zero.
        """
        tiers = self._store.list_ticket_tiers(event_id)
        booked = self._store.booked_quantities(event_id)
        remaining: dict[str, int] = {}
        for tier in tiers:
            left = tier.quantity - booked.get(tier.tier, 0)
            remaining[tier.tier] = max(0, left) if clamp else left
        return remaining

    async def total_remaining(self, event_id: int) -> int:
        remaining = await self.compute_remaining(event_id, clamp=True)
        return sum(remaining.values())

    async def is_sold_out(self, event_id: int) -> bool:
        """True when no tier has a seat left (an event with no tiers is sold out)."""
        return await self.total_remaining(event_id) == 0

    async def availability(self, event_id: int) -> AvailabilityRead:
        """Availability snapshot for a published event's detail page.

        Raises
        ------
        NotFoundError
            If the event does not exist or is not published.
        """
        event = self._store.get_event(event_id)
        if event is None or event.status != EventStatus.PUBLISHED:
            raise NotFoundError(code=ErrorCode.EVENT_NOT_FOUND, message="Workshop not found.", field="event_id")

        tiers = self._store.list_ticket_tiers(event_id)
        booked = self._store.booked_quantities(event_id)
        tier_rows = [
            TierAvailability(
                tier=tier.tier,
                quantity=tier.quantity,
                price=tier.price,
                remaining=max(0, tier.quantity - booked.get(tier.tier, 0)),
            )
            for tier in tiers
        ]
        total = sum(row.remaining for row in tier_rows)
        return AvailabilityRead(
            event_id=event.id,
            title=event.title,
            event_date=event.event_date,
            tiers=tier_rows,
            total_remaining=total,
            sold_out=total == 0,
            waitlist_count=self._store.count_waiting(event_id),
            max_per_booking=self.max_per_booking,
        )
