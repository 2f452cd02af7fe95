# rental/models/invoice.py

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship

from ..database import Base
from .types import UTCDateTime, utcnow


class Invoice(Base):
    """Settlement record issued once, when the seeker confirms the return."""

    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("additional_fees >= 0", name="check_fees_non_negative"),
        CheckConstraint("tax >= 0", name="check_tax_non_negative"),
        CheckConstraint("total_amount >= 0", name="check_total_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, unique=True)
    booking_amount = Column(Numeric(10, 2), nullable=False)
    additional_fees = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False)
    tax_rate = Column(Numeric(5, 4), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    booking = relationship("Booking", back_populates="invoice")

    def __repr__(self) -> str:
        return f"<Invoice {self.id} booking={self.booking_id} total={self.total_amount}>"
