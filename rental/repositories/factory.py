# rental/repositories/factory.py
"""
Repository Factory for the rental booking core.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import Any, Type

from sqlalchemy.orm import Session

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .invoice_repository import InvoiceRepository
from .otp_token_repository import OtpTokenRepository
from .user_repository import UserRepository
from .vehicle_repository import VehicleRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_base_repository(db: Session, model: Type[Any]) -> BaseRepository[Any]:
        """Create a generic base repository for any model."""
        return BaseRepository(db, model)

    @staticmethod
    def create_booking_repository(db: Session) -> BookingRepository:
        """Create repository for booking operations."""
        return BookingRepository(db)

    @staticmethod
    def create_otp_token_repository(db: Session) -> OtpTokenRepository:
        """Create repository for OTP token storage."""
        return OtpTokenRepository(db)

    @staticmethod
    def create_invoice_repository(db: Session) -> InvoiceRepository:
        """Create repository for settlement invoices."""
        return InvoiceRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        """Create repository for user lookups."""
        return UserRepository(db)

    @staticmethod
    def create_vehicle_repository(db: Session) -> VehicleRepository:
        """Create repository for vehicle lookups."""
        return VehicleRepository(db)
