"""
Event availability endpoints for API v1.

Events themselves are managed by the organiser dashboard; this router
only exposes what the booking page needs to know about them.
"""

from fastapi import APIRouter, Depends, Path

from workshop_booking_api.app.api.deps import get_capacity_ledger
from workshop_booking_api.app.api.errors import to_http_exception
from workshop_booking_api.app.core.errors import DomainError
from workshop_booking_api.app.schemas.event import AvailabilityRead
from workshop_booking_api.app.services.capacity_service import CapacityLedger


router = APIRouter()


@router.get("/{event_id}/availability", response_model=AvailabilityRead)
async def get_availability(
    event_id: int = Path(..., description="ID of the workshop"),
    ledger: CapacityLedger = Depends(get_capacity_ledger),
) -> AvailabilityRead:
    """Remaining seats per tier, sold-out flag and waitlist length for a published workshop."""
    try:
        return await ledger.availability(event_id)
    except DomainError as e:
        raise to_http_exception(e)
