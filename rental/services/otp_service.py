# rental/services/otp_service.py
"""
OTP issuance and verification for gated booking transitions.

Codes are numeric, generated with ``secrets`` and stored one per
(booking, purpose). Verification collapses every failure mode (unknown
token, wrong code, other booking, other purpose, expired) into a single
negative answer.
"""

from datetime import datetime
import logging
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import OtpPurpose
from ..models.otp_token import OtpToken
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.otp_token_repository import OtpTokenRepository
from ..utils.time_helpers import ensure_utc, utc_now
from .base import BaseService

logger = logging.getLogger(__name__)


class OtpService(BaseService):
    """Issue, verify and consume booking OTPs."""

    def __init__(self, db: Session, otp_repository: Optional[OtpTokenRepository] = None):
        super().__init__(db)
        self.otp_repository = otp_repository or RepositoryFactory.create_otp_token_repository(db)

    @staticmethod
    def generate_code(length: Optional[int] = None) -> str:
        """Random numeric code of ``length`` digits (leading zeros kept)."""
        length = length or settings.otp_length
        return "".join(secrets.choice("0123456789") for _ in range(length))

    def issue(self, booking_id: int, purpose: OtpPurpose, expires_at: datetime) -> str:
        """
        Create a fresh token for the booking, superseding any previous one.

        Runs inside the caller's transaction; nothing is committed here.

        Returns:
            The plaintext code, for delivery to the seeker
        """
        code = self.generate_code()
        self.otp_repository.replace_for_booking(
            booking_id=booking_id,
            purpose=purpose,
            otp=code,
            expires_at=ensure_utc(expires_at),
        )
        self.logger.debug(f"Issued {purpose.value} OTP for booking {booking_id}")
        return code

    def verify(
        self,
        booking_id: int,
        purpose: OtpPurpose,
        otp: str,
        now: Optional[datetime] = None,
    ) -> Optional[OtpToken]:
        """
        Return the matching live token, or None.

        Callers must not distinguish why verification failed.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        token = self.otp_repository.get_for_booking(booking_id, purpose)

        valid = (
            token is not None
            and secrets.compare_digest(token.otp.encode(), (otp or "").encode())
            and token.booking_id == booking_id
            and token.purpose == purpose.value
            and ensure_utc(token.expires_at) > now
        )
        prometheus_metrics.inc_otp_verification(purpose.value, valid)

        if not valid:
            self.logger.info(f"Rejected {purpose.value} OTP for booking {booking_id}")
            return None
        return token

    def consume(self, token_id: int) -> bool:
        """Delete a used token. Does not commit."""
        return self.otp_repository.delete(token_id)
