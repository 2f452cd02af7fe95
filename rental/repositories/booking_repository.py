# rental/repositories/booking_repository.py
"""
Booking Repository for the rental booking core.

This repository handles:
- Vehicle calendar conflict checks
- Atomic reserve-if-free inserts under a vehicle row lock
- Conditional status transitions
- Seeker/host paginated listings
- Booking details eager loading
"""

from datetime import datetime
import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import TERMINAL_STATUSES, Booking, BookingStatus
from ..models.types import utcnow
from ..models.vehicle import Vehicle
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_TERMINAL_VALUES = [status.value for status in TERMINAL_STATUSES]


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    # Conflict checking

    def has_vehicle_conflict(
        self,
        vehicle_id: int,
        pickup: datetime,
        dropoff: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        """
        Check whether any live booking of the vehicle intersects a window.

        Intervals are closed: a booking ending at the same instant another
        starts is a conflict. RETURNED and CANCELLED bookings never block.

        Args:
            vehicle_id: The vehicle ID
            pickup: Candidate window start
            dropoff: Candidate window end
            exclude_booking_id: Optional booking to ignore

        Returns:
            True if there are conflicts, False otherwise
        """
        try:
            query = self.db.query(Booking.id).filter(
                Booking.vehicle_id == vehicle_id,
                Booking.status.notin_(_TERMINAL_VALUES),
                Booking.scheduled_pickup_time <= dropoff,
                Booking.scheduled_dropoff_time >= pickup,
            )

            if exclude_booking_id is not None:
                query = query.filter(Booking.id != exclude_booking_id)

            return query.first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking vehicle conflict: {str(e)}")
            raise RepositoryException(f"Failed to check conflict: {str(e)}") from e

    def lock_vehicle(self, vehicle_id: int) -> None:
        """
        Serialize reservations for one vehicle until the transaction ends.

        Takes a row lock where the dialect has one. SQLite only has a
        database-wide write lock and pysqlite opens the transaction at the
        first write, so a no-op UPDATE claims that lock before the overlap
        re-check runs.
        """
        try:
            if self.supports_row_locks:
                self.db.query(Vehicle.id).filter(Vehicle.id == vehicle_id).with_for_update().first()
            else:
                self.db.execute(
                    update(Vehicle)
                    .where(Vehicle.id == vehicle_id)
                    .values(is_deleted=Vehicle.is_deleted)
                    .execution_options(synchronize_session=False)
                )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking vehicle {vehicle_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock vehicle: {str(e)}") from e

    def create_if_vehicle_free(self, **fields: Any) -> Optional[Booking]:
        """
        Insert a SCHEDULED booking unless the vehicle is already reserved.

        Must run inside the caller's transaction: the vehicle lock is held
        until it commits or rolls back.

        Returns:
            The new booking, or None when the window conflicts
        """
        vehicle_id = fields["vehicle_id"]
        self.lock_vehicle(vehicle_id)

        if self.has_vehicle_conflict(
            vehicle_id, fields["scheduled_pickup_time"], fields["scheduled_dropoff_time"]
        ):
            self.logger.info(f"Vehicle {vehicle_id} became unavailable before reservation")
            return None

        fields.setdefault("status", BookingStatus.SCHEDULED.value)
        return self.create(**fields)

    # State transitions

    def transition_status(
        self,
        booking_id: int,
        from_status: BookingStatus,
        to_status: BookingStatus,
        **values: Any,
    ) -> Optional[Booking]:
        """
        Move a booking between statuses only if it is still in ``from_status``.

        Issued as one conditional UPDATE so two racing requests cannot both
        apply the same transition.

        Returns:
            The refreshed booking, or None when no row matched
        """
        try:
            result = self.db.execute(
                update(Booking)
                .where(Booking.id == booking_id, Booking.status == from_status.value)
                .values(status=to_status.value, updated_at=utcnow(), **values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.logger.info(
                    f"Booking {booking_id} not in {from_status.value}; "
                    f"transition to {to_status.value} skipped"
                )
                return None

            return (
                self.db.query(Booking)
                .populate_existing()
                .filter(Booking.id == booking_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error transitioning booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking status: {str(e)}") from e

    # Listings

    def get_seeker_bookings(
        self, seeker_id: int, offset: int, limit: int
    ) -> Tuple[List[Booking], int]:
        """Page of a seeker's bookings, newest first, plus the total count."""
        return self._paginate(Booking.seeker_id == seeker_id, offset, limit)

    def get_host_bookings(self, host_id: int, offset: int, limit: int) -> Tuple[List[Booking], int]:
        """Page of a host's bookings, newest first, plus the total count."""
        return self._paginate(Booking.host_id == host_id, offset, limit)

    def _paginate(self, criterion: Any, offset: int, limit: int) -> Tuple[List[Booking], int]:
        try:
            total = self.db.query(Booking.id).filter(criterion).count()
            rows = (
                self.db.query(Booking)
                .options(joinedload(Booking.vehicle).selectinload(Vehicle.images))
                .filter(criterion)
                .order_by(Booking.created_at.desc(), Booking.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return rows, total
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings: {str(e)}")
            raise RepositoryException(f"Failed to list bookings: {str(e)}") from e

    def get_booking_with_details(self, booking_id: int) -> Optional[Booking]:
        """
        Get a booking with host, seeker, vehicle and invoice loaded.

        Args:
            booking_id: The booking ID

        Returns:
            The booking with all relationships, or None if not found
        """
        try:
            return (
                self.db.query(Booking)
                .options(
                    joinedload(Booking.host),
                    joinedload(Booking.seeker),
                    joinedload(Booking.vehicle).selectinload(Vehicle.images),
                    joinedload(Booking.invoice),
                )
                .populate_existing()
                .filter(Booking.id == booking_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking details: {str(e)}")
            raise RepositoryException(f"Failed to get booking details: {str(e)}") from e
