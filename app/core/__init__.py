"""Core utilities: exceptions, security and request middleware."""

from app.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AppException,
    ArrivalNotOpen,
    AuthenticationError,
    AuthorizationError,
    InvalidBookingStatus,
    NotCheckedInYet,
    NotFoundError,
    PersistenceFailure,
    RateLimitExceeded,
    ValidationError,
)

__all__ = [
    "AlreadyCheckedIn",
    "AlreadyCheckedOut",
    "AppException",
    "ArrivalNotOpen",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidBookingStatus",
    "NotCheckedInYet",
    "NotFoundError",
    "PersistenceFailure",
    "RateLimitExceeded",
    "ValidationError",
]
