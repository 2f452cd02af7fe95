# rental/models/booking.py
"""
Booking model for the rental platform.

A booking reserves one vehicle for one seeker between a normalized
pickup day-start and dropoff day-end. Rates and the cancellation policy
are snapshotted from the vehicle so later listing edits never change an
existing booking's economics.
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from ..database import Base
from .types import TimestampMixin, UTCDateTime

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    SCHEDULED = "SCHEDULED"  # Created, vehicle not yet handed over
    CHECKED_OUT = "CHECKED_OUT"  # Host confirmed pickup with the seeker's OTP
    RETURNED = "RETURNED"  # Seeker confirmed return, invoice issued
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({BookingStatus.RETURNED, BookingStatus.CANCELLED})

# Legal transitions; anything absent here is rejected
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.SCHEDULED: frozenset({BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_OUT: frozenset({BookingStatus.RETURNED}),
    BookingStatus.RETURNED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    """Whether ``current -> target`` is an edge of the booking state machine."""
    try:
        return BookingStatus(target) in ALLOWED_TRANSITIONS[BookingStatus(current)]
    except ValueError:
        return False


class Booking(TimestampMixin, Base):
    """Rental of one vehicle by one seeker from one host."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core relationships
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    host_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seeker_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=BookingStatus.SCHEDULED.value)
    pickup_location = Column(Text, nullable=False)
    dropoff_location = Column(Text, nullable=False)

    # Vehicle snapshot (preserved for settlement)
    booking_amount = Column(Numeric(10, 2), nullable=False)
    overdue_fee_rate_per_hour = Column(Numeric(10, 2), nullable=False)
    cancellation_allowed = Column(Boolean, nullable=False)

    actual_pickup_time = Column(UTCDateTime(), nullable=True)
    actual_dropoff_time = Column(UTCDateTime(), nullable=True)
    scheduled_pickup_time = Column(UTCDateTime(), nullable=False)
    scheduled_dropoff_time = Column(UTCDateTime(), nullable=False)

    # Relationships
    vehicle = relationship("Vehicle")
    host = relationship("User", foreign_keys=[host_id])
    seeker = relationship("User", foreign_keys=[seeker_id])
    invoice = relationship("Invoice", back_populates="booking", uselist=False)
    otp_tokens = relationship(
        "OtpToken", back_populates="booking", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('SCHEDULED', 'CHECKED_OUT', 'RETURNED', 'CANCELLED')",
            name="ck_bookings_status",
        ),
        CheckConstraint("booking_amount >= 0", name="check_amount_non_negative"),
        CheckConstraint("overdue_fee_rate_per_hour >= 0", name="check_overdue_rate_non_negative"),
        CheckConstraint(
            "scheduled_pickup_time < scheduled_dropoff_time", name="check_schedule_order"
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        """Initialize as SCHEDULED unless a status is supplied."""
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.SCHEDULED.value
        logger.debug(
            f"Creating booking for seeker {self.seeker_id} on vehicle {self.vehicle_id}"
        )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Booking {self.id}: vehicle={self.vehicle_id}, seeker={self.seeker_id}, "
            f"host={self.host_id}, window={self.scheduled_pickup_time}-"
            f"{self.scheduled_dropoff_time}, status={self.status}>"
        )

    @property
    def is_terminal(self) -> bool:
        return BookingStatus(self.status) in TERMINAL_STATUSES

    def is_party(self, user_id: int) -> bool:
        """Whether the user is the host or the seeker of this booking."""
        return user_id in (self.host_id, self.seeker_id)


# Serves the vehicle overlap check
Index(
    "ix_bookings_vehicle_window",
    Booking.vehicle_id,
    Booking.status,
    Booking.scheduled_pickup_time,
    Booking.scheduled_dropoff_time,
)

Index("ix_bookings_seeker_created", Booking.seeker_id, Booking.created_at)
Index("ix_bookings_host_created", Booking.host_id, Booking.created_at)
