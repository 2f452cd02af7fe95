"""Application-wide constants for the rental booking core."""

from __future__ import annotations

BRAND_NAME = "Wheelhouse Rentals"

# Email subjects
CHECKOUT_OTP_SUBJECT = f"Vehicle Checkout OTP – {BRAND_NAME}"
RETURN_OTP_SUBJECT = f"Vehicle Return OTP – {BRAND_NAME}"

# Currency precision used for every stored monetary amount
MONEY_QUANTUM = "0.01"
