"""
Pydantic schema definitions for the booking core.

Schemas double as the value objects returned by services (receipts,
availability snapshots, waitlist entries) so the API layer can return
them unchanged.
"""
