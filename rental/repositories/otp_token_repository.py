# rental/repositories/otp_token_repository.py
"""Data access for booking OTP tokens."""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import OtpPurpose
from ..core.exceptions import RepositoryException
from ..models.otp_token import OtpToken
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class OtpTokenRepository(BaseRepository[OtpToken]):
    """Repository for OtpToken rows; one live row per (booking, purpose)."""

    def __init__(self, db: Session):
        super().__init__(db, OtpToken)

    def get_for_booking(self, booking_id: int, purpose: OtpPurpose) -> Optional[OtpToken]:
        return self.find_one_by(booking_id=booking_id, purpose=purpose.value)

    def replace_for_booking(
        self, booking_id: int, purpose: OtpPurpose, otp: str, expires_at: datetime
    ) -> OtpToken:
        """Delete any previous token for the booking and purpose, then insert a new one."""
        try:
            deleted = (
                self.db.query(OtpToken)
                .filter(OtpToken.booking_id == booking_id, OtpToken.purpose == purpose.value)
                .delete(synchronize_session="fetch")
            )
            if deleted:
                self.logger.debug(f"Superseded {deleted} {purpose.value} OTP(s) for booking {booking_id}")
            self.db.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Error superseding OTP for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to supersede OTP: {str(e)}") from e

        return self.create(
            booking_id=booking_id,
            purpose=purpose.value,
            otp=otp,
            expires_at=expires_at,
        )
