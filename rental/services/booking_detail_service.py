# rental/services/booking_detail_service.py
"""
Read side of the booking core: paginated listings and the booking details view.

Nothing here mutates state or opens a transaction.
"""

import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import BookingNotFoundException, InvalidPaginationException
from ..models.booking import Booking
from ..principal import Actor
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import (
    BookingDetails,
    BookingDetailsUser,
    BookingDetailsVehicle,
    BookingListItem,
    InvoiceResponse,
    PaginatedBookings,
    PaginationInfo,
)
from .base import BaseService

logger = logging.getLogger(__name__)

PageLoader = Callable[[int, int, int], Tuple[List[Booking], int]]


class BookingDetailService(BaseService):
    """Listings for seekers and hosts, and the composed booking details view."""

    def __init__(self, db: Session, repository: Optional[BookingRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("get_seeker_bookings")
    def get_seeker_bookings(
        self, actor: Actor, page: int = 1, limit: Optional[int] = None
    ) -> PaginatedBookings:
        """Bookings made by the actor, newest first."""
        return self._list(self.repository.get_seeker_bookings, actor.user_id, page, limit)

    @BaseService.measure_operation("get_host_bookings")
    def get_host_bookings(
        self, actor: Actor, page: int = 1, limit: Optional[int] = None
    ) -> PaginatedBookings:
        """Bookings of the actor's vehicles, newest first."""
        return self._list(self.repository.get_host_bookings, actor.user_id, page, limit)

    @BaseService.measure_operation("get_booking_details")
    def get_booking_details(self, booking_id: int) -> BookingDetails:
        """
        Compose booking, host, seeker, vehicle and invoice into one view.

        Authorization is the caller's concern.

        Raises:
            BookingNotFoundException: If the booking does not exist
        """
        booking = self.repository.get_booking_with_details(booking_id)
        if booking is None:
            raise BookingNotFoundException(booking_id)

        vehicle = booking.vehicle
        return BookingDetails(
            id=booking.id,
            vehicle_id=booking.vehicle_id,
            host_id=booking.host_id,
            seeker_id=booking.seeker_id,
            status=booking.status,
            pickup_location=booking.pickup_location,
            dropoff_location=booking.dropoff_location,
            booking_amount=booking.booking_amount,
            overdue_fee_rate_per_hour=booking.overdue_fee_rate_per_hour,
            cancellation_allowed=booking.cancellation_allowed,
            scheduled_pickup_time=booking.scheduled_pickup_time,
            scheduled_dropoff_time=booking.scheduled_dropoff_time,
            actual_pickup_time=booking.actual_pickup_time,
            actual_dropoff_time=booking.actual_dropoff_time,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            host=BookingDetailsUser.model_validate(booking.host),
            seeker=BookingDetailsUser.model_validate(booking.seeker),
            vehicle=BookingDetailsVehicle(
                id=vehicle.id,
                name=vehicle.name,
                fuel_type=vehicle.fuel_type,
                seat_count=vehicle.seat_count,
                transmission_type=vehicle.transmission_type,
                rate_per_hour=vehicle.rate_per_hour,
                overdue_fee_rate_per_hour=vehicle.overdue_fee_rate_per_hour,
                featured_image_url=vehicle.featured_image_url,
            ),
            invoice=InvoiceResponse.model_validate(booking.invoice) if booking.invoice else None,
        )

    def _list(
        self, loader: PageLoader, user_id: int, page: int, limit: Optional[int]
    ) -> PaginatedBookings:
        if limit is None:
            limit = settings.default_page_size
        # Reject before touching storage
        if page < 1 or limit < 1:
            raise InvalidPaginationException(page, limit)

        limit = min(limit, settings.max_page_size)
        rows, total = loader(user_id, (page - 1) * limit, limit)

        return PaginatedBookings(
            data=[self._to_list_item(booking) for booking in rows],
            pagination=PaginationInfo(page=page, page_size=limit, total_count=total),
        )

    @staticmethod
    def _to_list_item(booking: Booking) -> BookingListItem:
        vehicle = booking.vehicle
        return BookingListItem(
            id=booking.id,
            status=booking.status,
            pickup_location=booking.pickup_location,
            dropoff_location=booking.dropoff_location,
            scheduled_pickup_time=booking.scheduled_pickup_time,
            scheduled_dropoff_time=booking.scheduled_dropoff_time,
            booking_amount=booking.booking_amount,
            overdue_fee_rate_per_hour=booking.overdue_fee_rate_per_hour,
            cancellation_allowed=booking.cancellation_allowed,
            created_at=booking.created_at,
            vehicle_id=vehicle.id,
            vehicle_name=vehicle.name,
            seat_count=vehicle.seat_count,
            fuel_type=vehicle.fuel_type,
            transmission_type=vehicle.transmission_type,
            featured_image_url=vehicle.featured_image_url,
        )
