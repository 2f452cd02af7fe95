# rental/core/exceptions.py
"""
Domain-specific exceptions for the rental booking core.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Every exception maps to a stable status/message pair through
``to_http_exception``; internal failures never expose their detail.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": "An unexpected error occurred. Please try again later",
                "code": "INTERNAL_ERROR",
                "details": {},
            },
        )


# Specific business exceptions


class InvalidBookingRequestException(ValidationException):
    """Raised when a booking request violates one or more field rules."""

    def __init__(self, errors: List[str]):
        super().__init__(
            message="Validation failed. Please check the provided details",
            code="INVALID_REQUEST",
            details={"errors": list(errors)},
        )


class InvalidPaginationException(ValidationException):
    """Raised when page or limit is not a positive integer."""

    def __init__(self, page: int, limit: int):
        super().__init__(
            message="Page and limit must be positive integers",
            code="INVALID_PAGINATION",
            details={"page": page, "limit": limit},
        )


class VehicleNotFoundException(NotFoundException):
    """Raised when a vehicle is missing or soft-deleted."""

    def __init__(self, vehicle_id: int):
        super().__init__(
            message="Vehicle not found",
            code="VEHICLE_NOT_FOUND",
            details={"vehicle_id": vehicle_id},
        )


class BookingNotFoundException(NotFoundException):
    """Raised when a booking does not exist."""

    def __init__(self, booking_id: int):
        super().__init__(
            message="Booking not found",
            code="BOOKING_NOT_FOUND",
            details={"booking_id": booking_id},
        )


class UserNotFoundException(NotFoundException):
    """Raised when a user does not exist."""

    def __init__(self, user_id: int):
        super().__init__(
            message="User not found",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class BookingConflictException(ConflictException):
    """Raised when a booking conflicts with existing bookings."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "The vehicle is already booked for the selected dates",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class ActionForbiddenException(ForbiddenException):
    """Raised when the actor may not perform a transition on a booking.

    Also used when the transition is illegal from the booking's current
    status, so callers see one uniform access-denial shape.
    """

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message=message or "Action forbidden",
            code="ACTION_FORBIDDEN",
        )


class BookingCancellationNotAllowedException(ForbiddenException):
    """Raised when a seeker cancels a booking whose vehicle forbids it."""

    def __init__(self) -> None:
        super().__init__(
            message="Cancellation is not allowed for this booking",
            code="BOOKING_CANCELLATION_NOT_ALLOWED",
        )


class InvalidOtpException(ValidationException):
    """Raised for a wrong, expired, or mis-bound OTP.

    The three cases are deliberately indistinguishable.
    """

    def __init__(self) -> None:
        super().__init__(message="Invalid or expired OTP", code="INVALID_OTP")


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
