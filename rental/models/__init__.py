"""
Database models for the rental booking core.

The booking aggregate (Booking, OtpToken, Invoice) is owned here;
User, Vehicle and VehicleImage mirror tables owned by neighbouring
subsystems and are only read by this package.
"""

from .booking import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, Booking, BookingStatus
from .invoice import Invoice
from .otp_token import OtpToken
from .user import User
from .vehicle import Vehicle, VehicleImage

__all__ = [
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "Booking",
    "BookingStatus",
    "Invoice",
    "OtpToken",
    "User",
    "Vehicle",
    "VehicleImage",
]
