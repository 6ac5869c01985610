"""Pydantic schemas for API request/response validation."""

from app.schemas.booking import (
    BookingActionResponse,
    BookingCreate,
    BookingListResponse,
    BookingPaymentUpdate,
    BookingResponse,
    BookingStats,
    BookingStatusUpdate,
    BookingSubmittedResponse,
    PaymentStats,
    PaymentSuggestion,
)
from app.schemas.user import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserListResponse,
    UserLogin,
    UserResponse,
    UserRoleUpdate,
    UserStats,
)

__all__ = [
    # Booking
    "BookingActionResponse",
    "BookingCreate",
    "BookingListResponse",
    "BookingPaymentUpdate",
    "BookingResponse",
    "BookingStats",
    "BookingStatusUpdate",
    "BookingSubmittedResponse",
    "PaymentStats",
    "PaymentSuggestion",
    # User
    "RefreshTokenRequest",
    "TokenResponse",
    "UserCreate",
    "UserListResponse",
    "UserLogin",
    "UserResponse",
    "UserRoleUpdate",
    "UserStats",
]
