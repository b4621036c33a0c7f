"""Translation of domain errors to HTTP responses."""

import logging

from fastapi import HTTPException, status

from workshop_booking_api.app.core.errors import (
    CapacityExceededError,
    DomainError,
    DuplicateWaitlistError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http_exception(exc: DomainError) -> HTTPException:
    """Map a domain error to an ``HTTPException`` with a structured detail."""
    detail = {"code": exc.code.value, "message": exc.message, "field": exc.field}
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    if isinstance(exc, CapacityExceededError):
        detail["remaining"] = max(exc.remaining, 0)
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    if isinstance(exc, (DuplicateWaitlistError, InvalidTransitionError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    if not isinstance(exc, PersistenceError):
        logger.error("Unmapped domain error: %s", exc)
    # Never expose store internals.
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": exc.code.value, "message": "Could not complete the request.", "field": None},
    )
