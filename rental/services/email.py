# rental/services/email.py
"""
Email Service for the rental booking core.

Sends booking OTP notifications through the Resend API. Unlike purely
informational mail, OTP delivery is part of the booking transaction:
every failure raises ServiceException so the caller rolls back.
"""

from datetime import datetime
import html
import logging
import re
from typing import Any, Dict, Optional, Union

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BRAND_NAME, CHECKOUT_OTP_SUBJECT, RETURN_OTP_SUBJECT
from ..core.exceptions import ServiceException
from .base import BaseService
from .email_console import ConsoleEmailService

logger = logging.getLogger(__name__)


def _format_expiry(expires_at: datetime) -> str:
    return expires_at.strftime("%Y-%m-%d %H:%M UTC")


def render_checkout_otp_email(name: str, otp: str, expires_at: datetime) -> str:
    """HTML body sent to the seeker when a booking is created."""
    return (
        f"<p>Hello {html.escape(name)},</p>"
        f"<p>Your booking with {BRAND_NAME} is confirmed. Share this one-time code with the "
        f"host when you collect the vehicle:</p>"
        f"<p><strong>OTP: {otp}</strong></p>"
        f"<p>The code is valid until {_format_expiry(expires_at)}. Do not share it with anyone "
        f"else.</p>"
    )


def render_return_otp_email(name: str, otp: str, expires_at: datetime, ttl_minutes: int) -> str:
    """HTML body sent to the seeker when the host initiates a return."""
    return (
        f"<p>Hello {html.escape(name)},</p>"
        f"<p>The host has started the return of your rental. Use this one-time code to "
        f"confirm the return:</p>"
        f"<p><strong>OTP: {otp}</strong></p>"
        f"<p>The code will expire in {ttl_minutes} minutes ({_format_expiry(expires_at)}).</p>"
    )


class EmailService(BaseService):
    """
    Service for sending emails using Resend API.

    Extends BaseService for consistent architecture, metrics collection,
    and standardized error handling.
    """

    def __init__(self, db: Session):
        super().__init__(db)

        api_key = settings.resend_api_key
        if not api_key:
            raise ServiceException("Resend API key not configured")

        resend.api_key = api_key.get_secret_value()
        self.from_email = settings.from_email
        self.from_name = settings.from_name

    @staticmethod
    def _html_to_text(html_content: str) -> str:
        """Convert HTML content to plain text for better deliverability"""
        text = re.sub(r"<[^>]+>", " ", html_content)
        return re.sub(r"\s+", " ", text).strip()

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send an email using Resend.

        Raises:
            ServiceException: If email sending fails
        """
        try:
            email_data: Dict[str, Any] = {
                "from": f"{self.from_name} <{self.from_email}>",
                "to": to_email,
                "subject": subject,
                "html": html_content,
                "text": text_content or self._html_to_text(html_content),
            }
            response = resend.Emails.send(email_data)

            self.log_operation("email_sent", to_email=to_email, subject=subject)
            return dict(response)

        except Exception as e:
            error_msg = str(e) or type(e).__name__
            self.logger.error(f"Failed to send email to {to_email}: {error_msg}")
            self.log_operation("email_failed", to_email=to_email, subject=subject, error=error_msg)
            raise ServiceException(f"Email sending failed: {error_msg}") from e

    def send_checkout_otp(self, to_email: str, name: str, otp: str, expires_at: datetime) -> None:
        self.send_email(
            to_email=to_email,
            subject=CHECKOUT_OTP_SUBJECT,
            html_content=render_checkout_otp_email(name, otp, expires_at),
        )

    def send_return_otp(self, to_email: str, name: str, otp: str, expires_at: datetime) -> None:
        self.send_email(
            to_email=to_email,
            subject=RETURN_OTP_SUBJECT,
            html_content=render_return_otp_email(
                name, otp, expires_at, settings.return_otp_ttl_minutes
            ),
        )


def create_email_service(db: Session) -> Union[EmailService, ConsoleEmailService]:
    """
    Pick the configured email sender.

    Selecting Resend without an API key raises ServiceException instead of
    silently dropping OTP mail.
    """
    if settings.email_provider == "console":
        return ConsoleEmailService()
    return EmailService(db)
