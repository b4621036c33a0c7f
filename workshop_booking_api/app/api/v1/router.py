"""
Top-level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
"""

from fastapi import APIRouter

from .endpoints import bookings, events, waitlist

router = APIRouter()

router.include_router(events.router, prefix="/events", tags=["events"])
# Bookings and waitlist routes define their full paths internally.
router.include_router(bookings.router, tags=["bookings"])
router.include_router(waitlist.router, tags=["waitlist"])
