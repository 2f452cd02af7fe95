# rental/models/vehicle.py
"""
Vehicle models.

Vehicles are managed elsewhere (listing CRUD, image upload); bookings
snapshot their rates and cancellation policy at creation time.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from ..database import Base
from .types import TimestampMixin


class Vehicle(TimestampMixin, Base):
    """A rentable vehicle listed by a host."""

    __tablename__ = "vehicles"
    __table_args__ = (
        CheckConstraint("rate_per_hour >= 0", name="check_rate_non_negative"),
        CheckConstraint("overdue_fee_rate_per_hour >= 0", name="check_overdue_rate_non_negative"),
        CheckConstraint("seat_count > 0", name="check_seat_count_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    host_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    fuel_type = Column(String(20), nullable=False)
    seat_count = Column(Integer, nullable=False)
    transmission_type = Column(String(20), nullable=False)
    rate_per_hour = Column(Numeric(10, 2), nullable=False)
    overdue_fee_rate_per_hour = Column(Numeric(10, 2), nullable=False)
    cancellation_allowed = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    host = relationship("User", foreign_keys=[host_id])
    images = relationship(
        "VehicleImage",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        order_by="VehicleImage.id",
    )

    @property
    def featured_image_url(self) -> str:
        """URL of the featured image, or an empty string."""
        for image in self.images:
            if image.featured:
                return image.url
        return ""

    def __repr__(self) -> str:
        return f"<Vehicle {self.id} {self.name!r} host={self.host_id}>"


class VehicleImage(Base):
    """Image attached to a vehicle listing."""

    __tablename__ = "vehicle_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(
        Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url = Column(String(500), nullable=False)
    featured = Column(Boolean, nullable=False, default=False)

    vehicle = relationship("Vehicle", back_populates="images")
