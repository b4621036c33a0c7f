"""
Application package initializer.

The project is split into a few layers: ``core`` (settings, logging,
database and error types), ``schemas`` (pydantic value objects),
``stores`` (data access behind an abstract interface), ``services``
(availability, validation, booking and waitlist logic) and ``api``
(versioned FastAPI routers that translate service results to HTTP).
"""

from .main import app  # noqa: F401
