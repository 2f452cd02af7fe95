"""Fee calculations for rentals: billed hours, booking amount, overdue fees and tax."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.config import settings
from ..core.constants import MONEY_QUANTUM
from ..utils.time_helpers import ceil_hours, ensure_utc

_CENTS = Decimal(MONEY_QUANTUM)


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Quantize to currency precision (2 dp, half-up)."""
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class RentalQuote:
    """Amount charged when a booking is created."""

    billed_hours: int
    rate_per_hour: Decimal
    booking_amount: Decimal


@dataclass(frozen=True)
class Settlement:
    """Invoice figures computed when a vehicle is returned."""

    booking_amount: Decimal
    overdue_hours: int
    additional_fees: Decimal
    tax_rate: Decimal
    tax: Decimal
    total_amount: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.booking_amount + self.additional_fees


class PricingService:
    """
    Compute rental charges.

    Every amount returned is non-negative: rates are validated
    non-negative when a vehicle is defined and hours are clamped at zero.
    """

    def __init__(self, tax_rate: Optional[Decimal] = None) -> None:
        self.tax_rate = Decimal(str(tax_rate if tax_rate is not None else settings.tax_rate))

    @staticmethod
    def billed_hours(pickup: datetime, dropoff: datetime) -> int:
        return ceil_hours(ensure_utc(dropoff) - ensure_utc(pickup))

    @staticmethod
    def overdue_hours(scheduled_dropoff: datetime, actual_return: datetime) -> int:
        return ceil_hours(ensure_utc(actual_return) - ensure_utc(scheduled_dropoff))

    def quote(self, pickup: datetime, dropoff: datetime, rate_per_hour: Decimal) -> RentalQuote:
        """Booking amount for a normalized window: ceil(hours) x hourly rate."""
        hours = self.billed_hours(pickup, dropoff)
        rate = Decimal(str(rate_per_hour))
        return RentalQuote(
            billed_hours=hours,
            rate_per_hour=rate,
            booking_amount=to_money(rate * hours),
        )

    def settle(
        self,
        booking_amount: Decimal,
        overdue_fee_rate_per_hour: Decimal,
        scheduled_dropoff: datetime,
        actual_return: datetime,
    ) -> Settlement:
        """
        Invoice figures for a return.

        total = (booking_amount + additional_fees) x (1 + tax_rate), rounded
        to currency precision; tax is the difference to the subtotal.
        """
        hours = self.overdue_hours(scheduled_dropoff, actual_return)
        base = to_money(booking_amount)
        fees = to_money(Decimal(str(overdue_fee_rate_per_hour)) * hours)
        subtotal = base + fees
        total = to_money(subtotal * (Decimal(1) + self.tax_rate))
        return Settlement(
            booking_amount=base,
            overdue_hours=hours,
            additional_fees=fees,
            tax_rate=self.tax_rate,
            tax=total - subtotal,
            total_amount=total,
        )
