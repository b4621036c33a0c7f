"""
Pydantic models for events, ticket tiers and seat availability.

Events and their tiers are owned by the organiser dashboard; this
service reads them to decide what can still be booked.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class TicketTierLabel(str, Enum):
    """The two seat categories sold for every workshop."""

    FULL = "full"
    CONCESSION = "concession"


TIER_LABELS: tuple[str, ...] = tuple(label.value for label in TicketTierLabel)


class EventRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    event_date: datetime
    status: EventStatus
    category_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class TicketTierRead(BaseModel):
    event_id: int
    tier: str
    quantity: int = Field(..., ge=0)
    price: float = Field(..., ge=0)


class TierAvailability(BaseModel):
    tier: str
    quantity: int
    price: float
    # Clamped at zero for display.
    remaining: int


class AvailabilityRead(BaseModel):
    """Seat availability snapshot shown on the workshop detail page."""

    event_id: int
    title: str
    event_date: datetime
    tiers: list[TierAvailability]
    total_remaining: int
    sold_out: bool
    waitlist_count: int
    max_per_booking: int
