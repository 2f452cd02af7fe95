# rental/services/booking_service.py
"""
Booking Service for the rental booking core.

Handles the booking lifecycle:
- Reserving a vehicle for a date window
- OTP-gated pickup and return
- Cancellation by host or eligible seeker
- Invoice settlement on return

Every operation takes the acting user explicitly. Multi-step writes
(booking row, OTP token, notification) succeed or roll back together;
only the deletion of a consumed OTP runs after commit, best effort.
"""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Optional, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import OtpPurpose
from ..core.exceptions import (
    ActionForbiddenException,
    BookingCancellationNotAllowedException,
    BookingConflictException,
    BookingNotFoundException,
    InvalidBookingRequestException,
    InvalidOtpException,
)
from ..models.booking import Booking, BookingStatus, can_transition
from ..models.invoice import Invoice
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import Actor
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.invoice_repository import InvoiceRepository
from ..schemas.booking import BookingCreate
from ..utils.time_helpers import end_of_day_utc, start_of_day_utc, utc_now
from .base import BaseService
from .email import EmailService, create_email_service
from .email_console import ConsoleEmailService
from .otp_service import OtpService
from .pricing_service import PricingService
from .user_service import UserService
from .vehicle_service import VehicleService

logger = logging.getLogger(__name__)

EmailSender = Union[EmailService, ConsoleEmailService]


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Centralizes all booking business logic and coordinates
    with the OTP, pricing, user, vehicle and email services.
    """

    def __init__(
        self,
        db: Session,
        email_service: Optional[EmailSender] = None,
        repository: Optional[BookingRepository] = None,
        invoice_repository: Optional[InvoiceRepository] = None,
        otp_service: Optional[OtpService] = None,
        pricing_service: Optional[PricingService] = None,
        user_service: Optional[UserService] = None,
        vehicle_service: Optional[VehicleService] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session
            email_service: Optional email sender (defaults to the configured provider)
            repository: Optional BookingRepository instance
            invoice_repository: Optional InvoiceRepository instance
            otp_service: Optional OtpService instance
            pricing_service: Optional PricingService instance
            user_service: Optional UserService instance
            vehicle_service: Optional VehicleService instance
        """
        super().__init__(db)
        self.email_service = email_service or create_email_service(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.invoice_repository = (
            invoice_repository or RepositoryFactory.create_invoice_repository(db)
        )
        self.otp_service = otp_service or OtpService(db)
        self.pricing_service = pricing_service or PricingService()
        self.user_service = user_service or UserService(db)
        self.vehicle_service = vehicle_service or VehicleService(db)

    @BaseService.measure_operation("create_booking")
    def create_booking(self, actor: Actor, request: BookingCreate) -> Booking:
        """
        Reserve a vehicle for whole days and send the seeker a checkout OTP.

        Args:
            actor: The seeker making the booking
            request: Booking request

        Returns:
            The SCHEDULED booking

        Raises:
            ActionForbiddenException: If the actor is not a seeker
            InvalidBookingRequestException: Listing every violated field rule
            VehicleNotFoundException: If the vehicle is missing or deleted
            BookingConflictException: If the window overlaps a live booking
            UserNotFoundException: If the seeker does not exist
            ServiceException: On storage or email failure (nothing is kept)
        """
        if not actor.is_seeker:
            raise ActionForbiddenException("Only seekers can create bookings")

        errors = request.collect_errors(utc_now().date())
        if errors:
            raise InvalidBookingRequestException(errors)

        vehicle = self.vehicle_service.get_vehicle(request.vehicle_id)

        pickup = start_of_day_utc(request.pickup_time)
        dropoff = end_of_day_utc(request.dropoff_time)

        if self.repository.has_vehicle_conflict(vehicle.id, pickup, dropoff):
            prometheus_metrics.inc_booking_conflict("precheck")
            raise BookingConflictException()

        seeker = self.user_service.get_user(actor.user_id)

        with self.transaction():
            quote = self.pricing_service.quote(pickup, dropoff, vehicle.rate_per_hour)

            booking = self.repository.create_if_vehicle_free(
                vehicle_id=vehicle.id,
                host_id=vehicle.host_id,
                seeker_id=seeker.id,
                pickup_location=request.pickup_location,
                dropoff_location=request.dropoff_location,
                scheduled_pickup_time=pickup,
                scheduled_dropoff_time=dropoff,
                booking_amount=quote.booking_amount,
                overdue_fee_rate_per_hour=vehicle.overdue_fee_rate_per_hour,
                cancellation_allowed=vehicle.cancellation_allowed,
            )
            if booking is None:
                prometheus_metrics.inc_booking_conflict("reserve")
                raise BookingConflictException()

            otp = self.otp_service.issue(
                booking.id, OtpPurpose.CHECKOUT, booking.scheduled_dropoff_time
            )
            self.email_service.send_checkout_otp(
                seeker.email, seeker.name, otp, booking.scheduled_dropoff_time
            )

        self.log_operation(
            "booking_created",
            booking_id=booking.id,
            vehicle_id=vehicle.id,
            seeker_id=seeker.id,
            billed_hours=quote.billed_hours,
        )
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, actor: Actor, booking_id: int) -> Booking:
        """
        Cancel a SCHEDULED booking.

        Hosts may always cancel; seekers only when the booking allows it.

        Raises:
            BookingNotFoundException: If the booking does not exist
            ActionForbiddenException: If the actor is not a party, or the
                booking is no longer SCHEDULED
            BookingCancellationNotAllowedException: Seeker on a non-cancellable booking
        """
        booking = self._get_booking(booking_id)

        if not booking.is_party(actor.user_id):
            raise ActionForbiddenException()

        if actor.user_id != booking.host_id and not booking.cancellation_allowed:
            raise BookingCancellationNotAllowedException()

        if booking.status != BookingStatus.SCHEDULED.value:
            raise ActionForbiddenException(
                f"Booking cannot be cancelled - current status: {booking.status}"
            )

        with self.transaction():
            cancelled = self._transition(booking_id, BookingStatus.SCHEDULED, BookingStatus.CANCELLED)
        prometheus_metrics.inc_booking_transition("SCHEDULED", "CANCELLED")

        self.run_post_commit(
            "discard checkout OTP",
            lambda: self._discard_token(booking_id, OtpPurpose.CHECKOUT),
        )
        self.log_operation("booking_cancelled", booking_id=booking_id, actor_id=actor.user_id)
        return cancelled

    @BaseService.measure_operation("confirm_pickup")
    def confirm_pickup(self, actor: Actor, booking_id: int, otp: str) -> Booking:
        """
        Host hands the vehicle over after checking the seeker's checkout OTP.

        Raises:
            BookingNotFoundException: If the booking does not exist
            ActionForbiddenException: If the actor is not the host, or the
                booking is not SCHEDULED
            InvalidOtpException: Wrong, expired or unknown OTP
        """
        booking = self._get_booking(booking_id)

        if actor.user_id != booking.host_id:
            raise ActionForbiddenException()

        token = self.otp_service.verify(booking_id, OtpPurpose.CHECKOUT, otp)
        if token is None:
            raise InvalidOtpException()

        if booking.status != BookingStatus.SCHEDULED.value:
            raise ActionForbiddenException()

        with self.transaction():
            checked_out = self._transition(
                booking_id,
                BookingStatus.SCHEDULED,
                BookingStatus.CHECKED_OUT,
                actual_pickup_time=utc_now(),
            )
        prometheus_metrics.inc_booking_transition("SCHEDULED", "CHECKED_OUT")

        token_id = token.id
        self.run_post_commit("delete checkout OTP", lambda: self.otp_service.consume(token_id))
        self.log_operation("booking_checked_out", booking_id=booking_id)
        return checked_out

    @BaseService.measure_operation("initiate_return")
    def initiate_return(self, actor: Actor, booking_id: int) -> None:
        """
        Host starts the return; the seeker receives a short-lived return OTP.

        Re-initiating supersedes any earlier return OTP.

        Raises:
            BookingNotFoundException: If the booking does not exist
            ActionForbiddenException: If the actor is not the host, or the
                booking is not CHECKED_OUT
            ServiceException: On storage or email failure (nothing is kept)
        """
        booking = self._get_booking(booking_id)

        if actor.user_id != booking.host_id or booking.status != BookingStatus.CHECKED_OUT.value:
            raise ActionForbiddenException()

        seeker = self.user_service.get_user(booking.seeker_id)
        expires_at = utc_now() + timedelta(minutes=settings.return_otp_ttl_minutes)

        with self.transaction():
            otp = self.otp_service.issue(booking_id, OtpPurpose.RETURN, expires_at)
            self.email_service.send_return_otp(seeker.email, seeker.name, otp, expires_at)

        self.log_operation("booking_return_initiated", booking_id=booking_id)

    @BaseService.measure_operation("confirm_return")
    def confirm_return(self, actor: Actor, booking_id: int, otp: str) -> Invoice:
        """
        Seeker confirms the return with the return OTP and the invoice is issued.

        Returns:
            The booking's invoice

        Raises:
            BookingNotFoundException: If the booking does not exist
            ActionForbiddenException: If the actor is not the seeker, or the
                booking is not CHECKED_OUT
            InvalidOtpException: Wrong, expired, unknown or already used OTP
        """
        booking = self._get_booking(booking_id)

        if actor.user_id != booking.seeker_id:
            raise ActionForbiddenException()

        token = self.otp_service.verify(booking_id, OtpPurpose.RETURN, otp)
        if token is None:
            raise InvalidOtpException()

        if booking.status != BookingStatus.CHECKED_OUT.value:
            raise ActionForbiddenException()

        returned_at = utc_now()
        with self.transaction():
            returned = self._transition(
                booking_id,
                BookingStatus.CHECKED_OUT,
                BookingStatus.RETURNED,
                actual_dropoff_time=returned_at,
            )
            settlement = self.pricing_service.settle(
                booking_amount=returned.booking_amount,
                overdue_fee_rate_per_hour=returned.overdue_fee_rate_per_hour,
                scheduled_dropoff=returned.scheduled_dropoff_time,
                actual_return=returned_at,
            )
            invoice = self.invoice_repository.create(
                booking_id=booking_id,
                booking_amount=settlement.booking_amount,
                additional_fees=settlement.additional_fees,
                tax=settlement.tax,
                tax_rate=settlement.tax_rate,
                total_amount=settlement.total_amount,
            )
        prometheus_metrics.inc_booking_transition("CHECKED_OUT", "RETURNED")

        token_id = token.id
        self.run_post_commit("delete return OTP", lambda: self.otp_service.consume(token_id))
        self.log_operation(
            "booking_returned",
            booking_id=booking_id,
            overdue_hours=settlement.overdue_hours,
            total_amount=str(settlement.total_amount),
        )
        return invoice

    # Helpers

    def _get_booking(self, booking_id: int) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundException(booking_id)
        return booking

    def _transition(
        self,
        booking_id: int,
        from_status: BookingStatus,
        to_status: BookingStatus,
        **values: object,
    ) -> Booking:
        """Conditional status change; a concurrent change makes it forbidden."""
        if not can_transition(from_status.value, to_status.value):
            raise ActionForbiddenException()
        updated = self.repository.transition_status(booking_id, from_status, to_status, **values)
        if updated is None:
            raise ActionForbiddenException()
        return updated

    def _discard_token(self, booking_id: int, purpose: OtpPurpose) -> None:
        token = self.otp_service.otp_repository.get_for_booking(booking_id, purpose)
        if token is not None:
            self.otp_service.consume(token.id)
