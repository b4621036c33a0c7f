"""
Waitlist endpoints for API v1.

Attendees join the queue of a sold-out workshop and can check their
place in it.  Organisers list the queue and close entries by marking
them notified or removed.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from workshop_booking_api.app.api.deps import get_waitlist_service
from workshop_booking_api.app.api.errors import to_http_exception
from workshop_booking_api.app.core.errors import DomainError
from workshop_booking_api.app.schemas.waitlist import (
    WaitlistEntryRead,
    WaitlistJoin,
    WaitlistReceipt,
    WaitlistStatusRead,
)
from workshop_booking_api.app.services.waitlist_service import WaitlistService


router = APIRouter()


@router.post(
    "/events/{event_id}/waitlist",
    response_model=WaitlistReceipt,
    status_code=status.HTTP_201_CREATED,
)
async def join_waitlist(
    body: WaitlistJoin,
    event_id: int = Path(..., description="ID of the workshop"),
    service: WaitlistService = Depends(get_waitlist_service),
) -> WaitlistReceipt:
    """Join the waitlist of a workshop.

    Returns 409 if the email is already waiting for this workshop.
    """
    try:
        return await service.join(event_id, body)
    except DomainError as e:
        raise to_http_exception(e)


@router.get(
    "/events/{event_id}/waitlist/status",
    response_model=WaitlistStatusRead,
)
async def waitlist_status(
    event_id: int = Path(..., description="ID of the workshop"),
    email: str = Query(..., min_length=1, description="Email used to join the waitlist"),
    service: WaitlistService = Depends(get_waitlist_service),
) -> WaitlistStatusRead:
    try:
        return await service.status(event_id, email)
    except DomainError as e:
        raise to_http_exception(e)


@router.get(
    "/waitlist",
    response_model=List[WaitlistEntryRead],
)
async def list_waitlist(
    event_id: Optional[int] = Query(None, description="Restrict to one workshop"),
    service: WaitlistService = Depends(get_waitlist_service),
) -> List[WaitlistEntryRead]:
    """Waiting entries grouped by workshop date, each with its queue position."""
    try:
        return await service.list_waiting(event_id)
    except DomainError as e:
        raise to_http_exception(e)


@router.get(
    "/waitlist/{entry_id}",
    response_model=WaitlistEntryRead,
    summary="Get a waitlist entry",
)
async def get_waitlist_entry(
    entry_id: int = Path(..., description="ID of the waitlist entry"),
    service: WaitlistService = Depends(get_waitlist_service),
) -> WaitlistEntryRead:
    try:
        return await service.get_entry(entry_id)
    except DomainError as e:
        raise to_http_exception(e)


@router.post(
    "/waitlist/{entry_id}/notify",
    response_model=WaitlistEntryRead,
    summary="Mark a waitlist entry as notified",
)
async def notify_waitlist_entry(
    entry_id: int = Path(..., description="ID of the waitlist entry"),
    service: WaitlistService = Depends(get_waitlist_service),
) -> WaitlistEntryRead:
    """Record that the organiser contacted the attendee.

    Only ``waiting`` entries can be notified; otherwise 409 is returned.
    """
    try:
        return await service.mark_notified(entry_id)
    except DomainError as e:
        raise to_http_exception(e)


@router.post(
    "/waitlist/{entry_id}/remove",
    response_model=WaitlistEntryRead,
    summary="Remove a waitlist entry",
)
async def remove_waitlist_entry(
    entry_id: int = Path(..., description="ID of the waitlist entry"),
    service: WaitlistService = Depends(get_waitlist_service),
) -> WaitlistEntryRead:
    """Take an entry off the queue.  The row is kept with status ``removed``."""
    try:
        return await service.remove(entry_id)
    except DomainError as e:
        raise to_http_exception(e)
