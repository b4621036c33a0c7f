"""
Service layer.

Each service receives a ``ReservationStore`` in its constructor and
holds the business rules for one part of the booking flow: seat
availability, request validation, committing bookings and the waitlist.
"""
