"""
Pydantic models for the workshop waitlist.

A waitlist entry starts as ``waiting`` and ends either ``notified``
(the organiser contacted the attendee) or ``removed``.  Both end states
are final.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .event import EventRead, TicketTierLabel


class WaitlistStatus(str, Enum):
    WAITING = "waiting"
    NOTIFIED = "notified"
    REMOVED = "removed"


class WaitlistJoin(BaseModel):
    """Schema for the join-waitlist form."""

    attendee_name: str = Field("", example="Bob Jones")
    attendee_email: str = Field("", example="bob@example.com")
    ticket_type: str = Field(TicketTierLabel.FULL.value, example="full")
    quantity: int = Field(1, example=1)


class WaitlistEntryRead(BaseModel):
    id: int
    event_id: int
    attendee_name: str
    attendee_email: str
    tier: str
    quantity: int
    requested_at: datetime
    status: WaitlistStatus
    notified_at: Optional[datetime] = None
    # Only filled in by ``list_waiting``: rank within the event's queue.
    position: Optional[int] = None
    event_title: Optional[str] = None
    event_date: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class WaitlistReceipt(BaseModel):
    """Returned after joining the waitlist.

    ``position`` is an estimate taken at insert time (waiting entries
    requested no later than this one) and may differ from the rank
    reported later by ``list_waiting``.
    """

    entry: WaitlistEntryRead
    position: int


class WaitlistStatusRead(BaseModel):
    on_waitlist: bool
    position: Optional[int] = None
    event_title: Optional[str] = None
    tier: Optional[str] = None
    quantity: Optional[int] = None
    requested_at: Optional[datetime] = None


class ValidatedWaitlistJoin(BaseModel):
    """A waitlist request that passed validation and is ready to insert."""

    event: EventRead
    attendee_name: str
    attendee_email: str
    tier: str
    quantity: int
