"""
Pydantic schemas for the rental booking core.
"""

from ._strict_base import StrictModel, StrictRequestModel
from .booking import (
    BookingCreate,
    BookingDetails,
    BookingDetailsUser,
    BookingDetailsVehicle,
    BookingListItem,
    BookingResponse,
    InvoiceResponse,
    OtpConfirm,
    PaginatedBookings,
    PaginationInfo,
)

__all__ = [
    "BookingCreate",
    "BookingDetails",
    "BookingDetailsUser",
    "BookingDetailsVehicle",
    "BookingListItem",
    "BookingResponse",
    "InvoiceResponse",
    "OtpConfirm",
    "PaginatedBookings",
    "PaginationInfo",
    "StrictModel",
    "StrictRequestModel",
]
