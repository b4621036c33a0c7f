"""
Booking endpoints for API v1.

These routes create reservations, show their confirmation and list an
event's bookings for the organiser.  Capacity checks and persistence
are delegated to ``BookingService``.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from workshop_booking_api.app.api.deps import get_booking_service
from workshop_booking_api.app.api.errors import to_http_exception
from workshop_booking_api.app.core.errors import DomainError
from workshop_booking_api.app.schemas.booking import BookingCreate, BookingRead, BookingReceipt
from workshop_booking_api.app.services.booking_service import BookingService


router = APIRouter()


@router.post(
    "/events/{event_id}/bookings",
    response_model=BookingReceipt,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    booking: BookingCreate,
    event_id: int = Path(..., description="ID of the workshop to book"),
    service: BookingService = Depends(get_booking_service),
) -> BookingReceipt:
    """Reserve seats in one or both tiers of a workshop.

    Returns 409 with the remaining seat count when a tier cannot cover
    the request; the caller may offer the waitlist instead.
    """
    try:
        return await service.reserve(event_id, booking.to_request())
    except DomainError as e:
        raise to_http_exception(e)


@router.get(
    "/events/{event_id}/bookings",
    response_model=List[BookingRead],
)
async def list_event_bookings(
    event_id: int = Path(..., description="ID of the workshop"),
    service: BookingService = Depends(get_booking_service),
) -> List[BookingRead]:
    """All booking rows of a workshop, oldest first."""
    try:
        return await service.list_bookings(event_id)
    except DomainError as e:
        raise to_http_exception(e)


@router.get(
    "/events/{event_id}/reservations/{reservation_id}",
    response_model=BookingReceipt,
    summary="Get a booking confirmation",
)
async def get_confirmation(
    event_id: int = Path(..., description="ID of the workshop"),
    reservation_id: str = Path(..., description="Reservation identifier from the booking receipt"),
    service: BookingService = Depends(get_booking_service),
) -> BookingReceipt:
    try:
        return await service.get_confirmation(event_id, reservation_id)
    except DomainError as e:
        raise to_http_exception(e)
