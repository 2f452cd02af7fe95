# rental/models/otp_token.py

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base
from .types import UTCDateTime, utcnow


class OtpToken(Base):
    """Single-use code gating a booking status transition."""

    __tablename__ = "otp_tokens"
    __table_args__ = (
        # One live token per booking per gated transition
        UniqueConstraint("booking_id", "purpose", name="uq_otp_tokens_booking_purpose"),
        CheckConstraint("purpose IN ('CHECKOUT', 'RETURN')", name="ck_otp_tokens_purpose"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purpose = Column(String(20), nullable=False)
    otp = Column(String(10), nullable=False)
    expires_at = Column(UTCDateTime(), nullable=False)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    booking = relationship("Booking", back_populates="otp_tokens")

    def __repr__(self) -> str:
        # Never render the code itself
        return f"<OtpToken {self.id} booking={self.booking_id} purpose={self.purpose}>"
