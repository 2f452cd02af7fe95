# rental/repositories/__init__.py
"""
Repository Pattern Implementation for the rental booking core.

This package provides the repository layer for data access,
separating business logic from database queries.

Usage:
    from rental.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    rows, total = repository.get_seeker_bookings(seeker_id, offset=0, limit=10)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .invoice_repository import InvoiceRepository
from .otp_token_repository import OtpTokenRepository
from .user_repository import UserRepository
from .vehicle_repository import VehicleRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "InvoiceRepository",
    "OtpTokenRepository",
    "RepositoryFactory",
    "UserRepository",
    "VehicleRepository",
]
