"""BookingService behaviour with every collaborator mocked."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from rental.core.enums import OtpPurpose, RoleName
from rental.core.exceptions import (
    ActionForbiddenException,
    BookingCancellationNotAllowedException,
    BookingConflictException,
    BookingNotFoundException,
    InvalidBookingRequestException,
    InvalidOtpException,
    ServiceException,
    VehicleNotFoundException,
)
from rental.models.booking import BookingStatus
from rental.principal import Actor
from rental.schemas.booking import BookingCreate
from rental.services.booking_service import BookingService
from rental.services.pricing_service import PricingService

NOW = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)
HOST = Actor(user_id=10, role=RoleName.HOST)
SEEKER = Actor(user_id=20, role=RoleName.SEEKER)
STRANGER = Actor(user_id=99, role=RoleName.SEEKER)


def make_booking(**overrides: object) -> SimpleNamespace:
    fields = {
        "id": 1,
        "vehicle_id": 3,
        "host_id": HOST.user_id,
        "seeker_id": SEEKER.user_id,
        "status": BookingStatus.SCHEDULED.value,
        "cancellation_allowed": True,
        "booking_amount": Decimal("4800.00"),
        "overdue_fee_rate_per_hour": Decimal("50.00"),
        "scheduled_pickup_time": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "scheduled_dropoff_time": datetime(2025, 1, 2, 23, 59, 59, 999999, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    booking = SimpleNamespace(**fields)
    booking.is_party = lambda user_id: user_id in (booking.host_id, booking.seeker_id)
    return booking


def make_request(**overrides: object) -> BookingCreate:
    fields = {
        "vehicle_id": 3,
        "pickup_location": "Airport",
        "dropoff_location": "Downtown",
        "pickup_time": datetime(2025, 1, 1, 10, tzinfo=timezone.utc),
        "dropoff_time": datetime(2025, 1, 2, 8, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return BookingCreate(**fields)


@pytest.fixture(autouse=True)
def frozen_now(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("rental.services.booking_service.utc_now", lambda: NOW)


@pytest.fixture
def mock_db() -> MagicMock:
    return MagicMock()


@pytest.fixture
def mock_repository() -> MagicMock:
    repo = MagicMock()
    repo.get_by_id.return_value = make_booking()
    repo.has_vehicle_conflict.return_value = False
    repo.create_if_vehicle_free.side_effect = lambda **fields: SimpleNamespace(id=1, **fields)
    repo.transition_status.side_effect = lambda booking_id, from_status, to_status, **values: (
        make_booking(status=to_status.value, **values)
    )
    return repo


@pytest.fixture
def mock_otp_service() -> MagicMock:
    otp_service = MagicMock()
    otp_service.issue.return_value = "482913"
    otp_service.verify.return_value = SimpleNamespace(id=55)
    return otp_service


@pytest.fixture
def mock_vehicle_service() -> MagicMock:
    service = MagicMock()
    service.get_vehicle.return_value = SimpleNamespace(
        id=3,
        host_id=HOST.user_id,
        rate_per_hour=Decimal("100.00"),
        overdue_fee_rate_per_hour=Decimal("50.00"),
        cancellation_allowed=False,
    )
    return service


@pytest.fixture
def mock_user_service() -> MagicMock:
    service = MagicMock()
    service.get_user.return_value = SimpleNamespace(
        id=SEEKER.user_id, name="Sam", email="sam@example.com"
    )
    return service


@pytest.fixture
def mock_email() -> MagicMock:
    return MagicMock()


@pytest.fixture
def booking_service(
    mock_db: MagicMock,
    mock_repository: MagicMock,
    mock_otp_service: MagicMock,
    mock_vehicle_service: MagicMock,
    mock_user_service: MagicMock,
    mock_email: MagicMock,
) -> BookingService:
    return BookingService(
        mock_db,
        email_service=mock_email,
        repository=mock_repository,
        invoice_repository=MagicMock(),
        otp_service=mock_otp_service,
        pricing_service=PricingService(tax_rate=Decimal("0.18")),
        user_service=mock_user_service,
        vehicle_service=mock_vehicle_service,
    )


class TestCreateBooking:
    def test_reserves_normalized_window_and_sends_otp(
        self,
        booking_service: BookingService,
        mock_db: MagicMock,
        mock_repository: MagicMock,
        mock_email: MagicMock,
    ) -> None:
        booking = booking_service.create_booking(SEEKER, make_request())

        fields = mock_repository.create_if_vehicle_free.call_args.kwargs
        assert fields["scheduled_pickup_time"] == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert fields["scheduled_dropoff_time"] == datetime(
            2025, 1, 2, 23, 59, 59, 999999, tzinfo=timezone.utc
        )
        assert fields["booking_amount"] == Decimal("4800.00")
        assert fields["host_id"] == HOST.user_id
        assert fields["seeker_id"] == SEEKER.user_id
        assert fields["cancellation_allowed"] is False
        assert fields["overdue_fee_rate_per_hour"] == Decimal("50.00")

        booking_service.otp_service.issue.assert_called_once_with(
            booking.id, OtpPurpose.CHECKOUT, fields["scheduled_dropoff_time"]
        )
        mock_email.send_checkout_otp.assert_called_once_with(
            "sam@example.com", "Sam", "482913", fields["scheduled_dropoff_time"]
        )
        mock_db.commit.assert_called_once()

    def test_hosts_cannot_book(self, booking_service: BookingService) -> None:
        with pytest.raises(ActionForbiddenException):
            booking_service.create_booking(HOST, make_request())

    def test_reports_every_invalid_field(
        self, booking_service: BookingService, mock_vehicle_service: MagicMock
    ) -> None:
        request = make_request(
            vehicle_id=0,
            pickup_location="  ",
            dropoff_location="",
            pickup_time=datetime(2024, 12, 30, tzinfo=timezone.utc),
            dropoff_time=datetime(2024, 12, 29, tzinfo=timezone.utc),
        )

        with pytest.raises(InvalidBookingRequestException) as exc_info:
            booking_service.create_booking(SEEKER, request)

        assert len(exc_info.value.details["errors"]) == 5
        mock_vehicle_service.get_vehicle.assert_not_called()

    def test_missing_vehicle(
        self, booking_service: BookingService, mock_vehicle_service: MagicMock
    ) -> None:
        mock_vehicle_service.get_vehicle.side_effect = VehicleNotFoundException(3)

        with pytest.raises(VehicleNotFoundException):
            booking_service.create_booking(SEEKER, make_request())

    def test_precheck_conflict_opens_no_transaction(
        self,
        booking_service: BookingService,
        mock_repository: MagicMock,
        mock_db: MagicMock,
    ) -> None:
        mock_repository.has_vehicle_conflict.return_value = True

        with pytest.raises(BookingConflictException):
            booking_service.create_booking(SEEKER, make_request())

        mock_repository.create_if_vehicle_free.assert_not_called()
        mock_db.commit.assert_not_called()

    def test_conflict_at_reservation_rolls_back(
        self,
        booking_service: BookingService,
        mock_repository: MagicMock,
        mock_db: MagicMock,
        mock_email: MagicMock,
    ) -> None:
        mock_repository.create_if_vehicle_free.side_effect = None
        mock_repository.create_if_vehicle_free.return_value = None

        with pytest.raises(BookingConflictException):
            booking_service.create_booking(SEEKER, make_request())

        mock_db.rollback.assert_called_once()
        mock_email.send_checkout_otp.assert_not_called()

    def test_email_failure_rolls_back(
        self, booking_service: BookingService, mock_db: MagicMock, mock_email: MagicMock
    ) -> None:
        mock_email.send_checkout_otp.side_effect = ServiceException("Email sending failed")

        with pytest.raises(ServiceException):
            booking_service.create_booking(SEEKER, make_request())

        mock_db.rollback.assert_called_once()
        mock_db.commit.assert_not_called()


class TestCancelBooking:
    def test_missing_booking(self, booking_service: BookingService, mock_repository: MagicMock) -> None:
        mock_repository.get_by_id.return_value = None

        with pytest.raises(BookingNotFoundException):
            booking_service.cancel_booking(HOST, 1)

    def test_stranger_is_forbidden(self, booking_service: BookingService) -> None:
        with pytest.raises(ActionForbiddenException):
            booking_service.cancel_booking(STRANGER, 1)

    def test_seeker_blocked_when_cancellation_not_allowed(
        self, booking_service: BookingService, mock_repository: MagicMock
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(cancellation_allowed=False)

        with pytest.raises(BookingCancellationNotAllowedException):
            booking_service.cancel_booking(SEEKER, 1)

        mock_repository.transition_status.assert_not_called()

    def test_host_ignores_cancellation_flag(
        self, booking_service: BookingService, mock_repository: MagicMock
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(cancellation_allowed=False)

        cancelled = booking_service.cancel_booking(HOST, 1)

        assert cancelled.status == BookingStatus.CANCELLED.value
        mock_repository.transition_status.assert_called_once_with(
            1, BookingStatus.SCHEDULED, BookingStatus.CANCELLED
        )

    def test_seeker_may_cancel_when_allowed(self, booking_service: BookingService) -> None:
        assert booking_service.cancel_booking(SEEKER, 1).status == BookingStatus.CANCELLED.value

    @pytest.mark.parametrize(
        "status", [BookingStatus.CHECKED_OUT, BookingStatus.RETURNED, BookingStatus.CANCELLED]
    )
    def test_only_scheduled_bookings_cancel(
        self, booking_service: BookingService, mock_repository: MagicMock, status: BookingStatus
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=status.value)

        with pytest.raises(ActionForbiddenException):
            booking_service.cancel_booking(HOST, 1)

    def test_lost_race_is_forbidden(
        self, booking_service: BookingService, mock_repository: MagicMock, mock_db: MagicMock
    ) -> None:
        mock_repository.transition_status.side_effect = None
        mock_repository.transition_status.return_value = None

        with pytest.raises(ActionForbiddenException):
            booking_service.cancel_booking(HOST, 1)

        mock_db.rollback.assert_called()


class TestConfirmPickup:
    def test_host_checks_out_with_valid_otp(
        self, booking_service: BookingService, mock_repository: MagicMock, mock_otp_service: MagicMock
    ) -> None:
        booking = booking_service.confirm_pickup(HOST, 1, "482913")

        assert booking.status == BookingStatus.CHECKED_OUT.value
        mock_repository.transition_status.assert_called_once_with(
            1, BookingStatus.SCHEDULED, BookingStatus.CHECKED_OUT, actual_pickup_time=NOW
        )
        mock_otp_service.verify.assert_called_once_with(1, OtpPurpose.CHECKOUT, "482913")
        mock_otp_service.consume.assert_called_once_with(55)

    def test_seeker_cannot_confirm_pickup(
        self, booking_service: BookingService, mock_otp_service: MagicMock
    ) -> None:
        with pytest.raises(ActionForbiddenException):
            booking_service.confirm_pickup(SEEKER, 1, "482913")
        mock_otp_service.verify.assert_not_called()

    def test_invalid_otp(
        self, booking_service: BookingService, mock_otp_service: MagicMock, mock_repository: MagicMock
    ) -> None:
        mock_otp_service.verify.return_value = None

        with pytest.raises(InvalidOtpException):
            booking_service.confirm_pickup(HOST, 1, "000000")
        mock_repository.transition_status.assert_not_called()

    def test_wrong_status_is_forbidden(
        self, booking_service: BookingService, mock_repository: MagicMock
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=BookingStatus.CANCELLED.value)

        with pytest.raises(ActionForbiddenException):
            booking_service.confirm_pickup(HOST, 1, "482913")

    def test_token_cleanup_failure_does_not_fail_pickup(
        self, booking_service: BookingService, mock_otp_service: MagicMock
    ) -> None:
        mock_otp_service.consume.side_effect = RuntimeError("db went away")

        booking = booking_service.confirm_pickup(HOST, 1, "482913")

        assert booking.status == BookingStatus.CHECKED_OUT.value


class TestInitiateReturn:
    def test_issues_return_otp_to_seeker(
        self,
        booking_service: BookingService,
        mock_repository: MagicMock,
        mock_otp_service: MagicMock,
        mock_user_service: MagicMock,
        mock_email: MagicMock,
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=BookingStatus.CHECKED_OUT.value)
        expires_at = NOW + timedelta(minutes=20)

        booking_service.initiate_return(HOST, 1)

        mock_user_service.get_user.assert_called_once_with(SEEKER.user_id)
        mock_otp_service.issue.assert_called_once_with(1, OtpPurpose.RETURN, expires_at)
        mock_email.send_return_otp.assert_called_once_with(
            "sam@example.com", "Sam", "482913", expires_at
        )

    @pytest.mark.parametrize(
        "actor, status",
        [
            (SEEKER, BookingStatus.CHECKED_OUT),
            (HOST, BookingStatus.SCHEDULED),
            (HOST, BookingStatus.RETURNED),
        ],
    )
    def test_forbidden(
        self,
        booking_service: BookingService,
        mock_repository: MagicMock,
        actor: Actor,
        status: BookingStatus,
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=status.value)

        with pytest.raises(ActionForbiddenException):
            booking_service.initiate_return(actor, 1)

    def test_email_failure_rolls_back(
        self,
        booking_service: BookingService,
        mock_repository: MagicMock,
        mock_email: MagicMock,
        mock_db: MagicMock,
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=BookingStatus.CHECKED_OUT.value)
        mock_email.send_return_otp.side_effect = ServiceException("Email sending failed")

        with pytest.raises(ServiceException):
            booking_service.initiate_return(HOST, 1)

        mock_db.rollback.assert_called_once()


class TestConfirmReturn:
    def test_seeker_returns_and_invoice_is_created(
        self, booking_service: BookingService, mock_repository: MagicMock, mock_otp_service: MagicMock
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=BookingStatus.CHECKED_OUT.value)

        booking_service.confirm_return(SEEKER, 1, "482913")

        mock_repository.transition_status.assert_called_once_with(
            1, BookingStatus.CHECKED_OUT, BookingStatus.RETURNED, actual_dropoff_time=NOW
        )
        booking_service.invoice_repository.create.assert_called_once_with(
            booking_id=1,
            booking_amount=Decimal("4800.00"),
            additional_fees=Decimal("0.00"),
            tax=Decimal("864.00"),
            tax_rate=Decimal("0.18"),
            total_amount=Decimal("5664.00"),
        )
        mock_otp_service.consume.assert_called_once_with(55)

    def test_host_cannot_confirm_return(
        self, booking_service: BookingService, mock_repository: MagicMock
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=BookingStatus.CHECKED_OUT.value)

        with pytest.raises(ActionForbiddenException):
            booking_service.confirm_return(HOST, 1, "482913")

    def test_otp_is_checked_before_status(
        self, booking_service: BookingService, mock_repository: MagicMock, mock_otp_service: MagicMock
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=BookingStatus.RETURNED.value)
        mock_otp_service.verify.return_value = None

        with pytest.raises(InvalidOtpException):
            booking_service.confirm_return(SEEKER, 1, "482913")

    def test_concurrent_return_loses_conditional_update(
        self,
        booking_service: BookingService,
        mock_repository: MagicMock,
        mock_db: MagicMock,
    ) -> None:
        mock_repository.get_by_id.return_value = make_booking(status=BookingStatus.CHECKED_OUT.value)
        mock_repository.transition_status.side_effect = None
        mock_repository.transition_status.return_value = None

        with pytest.raises(ActionForbiddenException):
            booking_service.confirm_return(SEEKER, 1, "482913")

        booking_service.invoice_repository.create.assert_not_called()
        mock_db.rollback.assert_called_once()
