from datetime import datetime
import logging
from typing import Any

from ..core.constants import CHECKOUT_OTP_SUBJECT, RETURN_OTP_SUBJECT

logger = logging.getLogger(__name__)


class ConsoleEmailService:
    """Email sender used in development and tests; records the envelope only."""

    def __init__(self, *_: Any, **__: Any) -> None:
        pass

    def send_checkout_otp(self, to_email: str, name: str, otp: str, expires_at: datetime) -> None:
        logger.info(f"[console email] to={to_email} subject={CHECKOUT_OTP_SUBJECT!r}")

    def send_return_otp(self, to_email: str, name: str, otp: str, expires_at: datetime) -> None:
        logger.info(f"[console email] to={to_email} subject={RETURN_OTP_SUBJECT!r}")
