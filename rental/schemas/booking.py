# rental/schemas/booking.py
"""
Booking schemas for the rental booking core.

Request models accept loosely-typed input and report every violated rule
at once through ``collect_errors``; response models are built from ORM
rows with ``model_validate``.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from ..models.booking import BookingStatus
from ..utils.time_helpers import ensure_utc
from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """
    Request to reserve a vehicle.

    Only the calendar dates of ``pickup_time`` and ``dropoff_time`` matter
    for the reservation window; the service normalizes them to whole days.
    """

    vehicle_id: int = Field(0, description="Vehicle to book")
    pickup_location: str = Field("", description="Where the seeker collects the vehicle")
    dropoff_location: str = Field("", description="Where the seeker returns the vehicle")
    pickup_time: Optional[datetime] = Field(None, description="Requested pickup (UTC)")
    dropoff_time: Optional[datetime] = Field(None, description="Requested dropoff (UTC)")

    @field_validator("pickup_time", "dropoff_time")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @field_validator("pickup_location", "dropoff_location")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    def collect_errors(self, today: date) -> List[str]:
        """Return a message for every rule the request violates (empty when valid)."""
        errors: List[str] = []

        if self.vehicle_id <= 0:
            errors.append("vehicle_id must be a positive integer")
        if not self.pickup_location:
            errors.append("pickup_location is required")
        if not self.dropoff_location:
            errors.append("dropoff_location is required")
        if self.pickup_time is None:
            errors.append("pickup_time is required")
        if self.dropoff_time is None:
            errors.append("dropoff_time is required")

        if self.pickup_time is not None and self.pickup_time.date() < today:
            errors.append("pickup_time cannot be in the past")
        if (
            self.pickup_time is not None
            and self.dropoff_time is not None
            and self.pickup_time >= self.dropoff_time
        ):
            errors.append("pickup_time must be before dropoff_time")

        return errors


class OtpConfirm(StrictRequestModel):
    """OTP presented to confirm a pickup or a return."""

    otp: str = Field(..., min_length=1, max_length=10)

    @field_validator("otp")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class BookingResponse(StrictModel):
    id: int
    vehicle_id: int
    host_id: int
    seeker_id: int
    status: BookingStatus
    pickup_location: str
    dropoff_location: str
    booking_amount: Decimal
    overdue_fee_rate_per_hour: Decimal
    cancellation_allowed: bool
    scheduled_pickup_time: datetime
    scheduled_dropoff_time: datetime
    actual_pickup_time: Optional[datetime] = None
    actual_dropoff_time: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class InvoiceResponse(StrictModel):
    id: int
    booking_id: int
    booking_amount: Decimal
    additional_fees: Decimal
    tax: Decimal
    tax_rate: Decimal
    total_amount: Decimal
    created_at: datetime


class BookingListItem(StrictModel):
    """One row of a seeker or host booking listing."""

    id: int
    status: BookingStatus
    pickup_location: str
    dropoff_location: str
    scheduled_pickup_time: datetime
    scheduled_dropoff_time: datetime
    booking_amount: Decimal
    overdue_fee_rate_per_hour: Decimal
    cancellation_allowed: bool
    created_at: datetime
    vehicle_id: int
    vehicle_name: str
    seat_count: int
    fuel_type: str
    transmission_type: str
    featured_image_url: str = ""


class PaginationInfo(StrictModel):
    page: int
    page_size: int
    total_count: int


class PaginatedBookings(StrictModel):
    data: List[BookingListItem]
    pagination: PaginationInfo


class BookingDetailsUser(StrictModel):
    id: int
    name: str
    email: str
    phone_number: Optional[str] = None


class BookingDetailsVehicle(StrictModel):
    id: int
    name: str
    fuel_type: str
    seat_count: int
    transmission_type: str
    rate_per_hour: Decimal
    overdue_fee_rate_per_hour: Decimal
    featured_image_url: str = ""


class BookingDetails(BookingResponse):
    """Booking composed with both parties, the vehicle and the invoice if issued."""

    host: BookingDetailsUser
    seeker: BookingDetailsUser
    vehicle: BookingDetailsVehicle
    invoice: Optional[InvoiceResponse] = None
