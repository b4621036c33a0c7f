"""
Pydantic models for bookings.

``BookingCreate`` mirrors the booking form (one quantity field per
tier).  ``BookingRequest`` is the tier-to-quantity form used by the
services, ``ValidatedBooking`` the normalised result of validation and
``BookingReceipt`` what a committed reservation looks like to callers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .event import EventRead, TicketTierLabel, TicketTierRead


class BookingCreate(BaseModel):
    """Schema for the booking form."""

    attendee_name: str = Field("", example="Alice Smith")
    attendee_email: Optional[str] = Field(None, example="alice@example.com")
    dietary_notes: Optional[str] = Field(None, example="Vegetarian")
    full_quantity: int = Field(0, example=2)
    concession_quantity: int = Field(0, example=0)

    def to_request(self) -> "BookingRequest":
        return BookingRequest(
            attendee_name=self.attendee_name,
            attendee_email=self.attendee_email,
            dietary_notes=self.dietary_notes,
            quantities={
                TicketTierLabel.FULL.value: self.full_quantity,
                TicketTierLabel.CONCESSION.value: self.concession_quantity,
            },
        )


class BookingRequest(BaseModel):
    """A booking request as seen by the validator: tier label -> seats."""

    attendee_name: str = ""
    attendee_email: Optional[str] = None
    dietary_notes: Optional[str] = None
    quantities: dict[str, int] = Field(default_factory=dict)


class ValidatedBooking(BaseModel):
    """A booking request that passed validation and is ready to commit.

    ``quantities`` only holds tiers with a positive seat count.
    """

    event: EventRead
    attendee_name: str
    attendee_email: Optional[str] = None
    dietary_notes: Optional[str] = None
    quantities: dict[str, int]
    tiers: dict[str, TicketTierRead]

    @property
    def total_quantity(self) -> int:
        return sum(self.quantities.values())


class BookingRead(BaseModel):
    id: int
    event_id: int
    reservation_id: Optional[str] = None
    attendee_name: str
    attendee_email: Optional[str] = None
    tier: str
    quantity: int
    booking_date: datetime
    dietary_notes: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class BookingLine(BaseModel):
    tier: str
    quantity: int
    unit_price: float

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price


class BookingReceipt(BaseModel):
    """Confirmation of one reservation (all of its per-tier rows)."""

    reservation_id: str
    event_id: int
    event_title: str
    attendee_name: str
    attendee_email: Optional[str] = None
    lines: list[BookingLine]
    total_quantity: int
    total_price: float
    booking_date: datetime
