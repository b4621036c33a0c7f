"""Domain error codes for booking and waitlist operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Domain error codes."""

    NAME_REQUIRED = "NAME_REQUIRED"
    NAME_LENGTH = "NAME_LENGTH"
    EMAIL_REQUIRED = "EMAIL_REQUIRED"
    INVALID_EMAIL = "INVALID_EMAIL"
    NO_SEATS_SELECTED = "NO_SEATS_SELECTED"
    TOO_MANY_SEATS = "TOO_MANY_SEATS"
    NEGATIVE_QUANTITY = "NEGATIVE_QUANTITY"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_TIER = "INVALID_TIER"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_PASSED = "EVENT_PASSED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    ALREADY_ON_WAITLIST = "ALREADY_ON_WAITLIST"
    WAITLIST_ENTRY_NOT_FOUND = "WAITLIST_ENTRY_NOT_FOUND"
    WAITLIST_ENTRY_CLOSED = "WAITLIST_ENTRY_CLOSED"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code, user-safe message and offending field."""

    code: ErrorCode
    message: str
    field: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when request input is malformed or out of range."""


class NotFoundError(DomainError):
    """Raised when a referenced event, reservation or waitlist entry is absent."""


class CapacityExceededError(DomainError):
    """Raised when a tier has fewer remaining seats than requested."""

    def __init__(self, tier: str, requested: int, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=f"Only {max(remaining, 0)} {tier} seats available.",
            field=tier,
        )
        self.tier = tier
        self.requested = requested
        self.remaining = remaining


class DuplicateWaitlistError(DomainError):
    """Raised when an attendee already holds a waiting entry for the event."""

    def __init__(self, event_id: int, email: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_ON_WAITLIST,
            message="You are already on the waitlist for this workshop.",
            field="attendee_email",
        )
        self.event_id = event_id
        self.email = email


class InvalidTransitionError(DomainError):
    """Raised when a waitlist entry is no longer ``waiting``."""

    def __init__(self, entry_id: int, status: str) -> None:
        super().__init__(
            code=ErrorCode.WAITLIST_ENTRY_CLOSED,
            message=f"Waitlist entry is already {status}.",
            field="status",
        )
        self.entry_id = entry_id
        self.status = status


class PersistenceError(DomainError):
    """Raised when the underlying store fails."""

    def __init__(self, message: str = "Could not complete the request.") -> None:
        super().__init__(code=ErrorCode.PERSISTENCE_FAILURE, message=message)
