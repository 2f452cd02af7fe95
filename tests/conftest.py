"""
Shared pytest fixtures.

Every test that needs a database gets a private in-memory SQLite engine
with the full schema; nothing touches the configured DATABASE_URL.
"""

import os

# Must be set before rental.* is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EMAIL_PROVIDER", "console")

from datetime import datetime, timezone
from decimal import Decimal
import itertools
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rental import models  # noqa: F401  (registers tables)
from rental.core.enums import RoleName
from rental.database import Base
from rental.models import User, Vehicle, VehicleImage
from rental.principal import Actor
from rental.services.booking_detail_service import BookingDetailService
from rental.services.booking_service import BookingService


def _enable_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_sqlite_session() -> Session:
    """Fresh in-memory database with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()


@pytest.fixture
def db():
    session = build_sqlite_session()
    try:
        yield session
    finally:
        bind = session.get_bind()
        session.close()
        bind.dispose()


@pytest.fixture
def make_user(db: Session):
    counter = itertools.count(1)

    def _make(role: RoleName = RoleName.SEEKER, **overrides) -> User:
        n = next(counter)
        fields = {
            "name": f"User {n}",
            "email": f"user{n}@example.com",
            "phone_number": f"555-01{n:02d}",
            "role": role.value,
        }
        fields.update(overrides)
        user = User(**fields)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def host(make_user) -> User:
    return make_user(RoleName.HOST, name="Harriet Host")


@pytest.fixture
def seeker(make_user) -> User:
    return make_user(RoleName.SEEKER, name="Sam Seeker")


@pytest.fixture
def make_vehicle(db: Session):
    def _make(host: User, **overrides) -> Vehicle:
        fields = {
            "host_id": host.id,
            "name": "Compact Hatchback",
            "fuel_type": "PETROL",
            "seat_count": 5,
            "transmission_type": "MANUAL",
            "rate_per_hour": Decimal("100.00"),
            "overdue_fee_rate_per_hour": Decimal("50.00"),
            "cancellation_allowed": True,
        }
        fields.update(overrides)
        vehicle = Vehicle(**fields)
        vehicle.images = [
            VehicleImage(url="https://cdn.example.com/v/side.jpg", featured=False),
            VehicleImage(url="https://cdn.example.com/v/front.jpg", featured=True),
        ]
        db.add(vehicle)
        db.commit()
        return vehicle

    return _make


@pytest.fixture
def vehicle(make_vehicle, host: User) -> Vehicle:
    return make_vehicle(host)


@pytest.fixture
def host_actor(host: User) -> Actor:
    return Actor(user_id=host.id, role=RoleName.HOST)


@pytest.fixture
def seeker_actor(seeker: User) -> Actor:
    return Actor(user_id=seeker.id, role=RoleName.SEEKER)


@pytest.fixture
def mock_email() -> MagicMock:
    return MagicMock(spec=["send_checkout_otp", "send_return_otp"])


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> SimpleNamespace:
    """Controllable UTC clock for the booking and OTP services."""
    state = SimpleNamespace(now=datetime(2024, 12, 31, 9, 0, tzinfo=timezone.utc))
    monkeypatch.setattr("rental.services.booking_service.utc_now", lambda: state.now)
    monkeypatch.setattr("rental.services.otp_service.utc_now", lambda: state.now)
    return state


@pytest.fixture
def booking_service(db: Session, mock_email: MagicMock) -> BookingService:
    return BookingService(db, email_service=mock_email)


@pytest.fixture
def detail_service(db: Session) -> BookingDetailService:
    return BookingDetailService(db)


@pytest.fixture
def session_factory():
    """Factory for independent databases, for tests that need several."""
    return build_sqlite_session
