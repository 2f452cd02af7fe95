"""
Core enums for the rental booking core.

This module contains enumeration types used throughout the application
for type safety and consistency.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles an authenticated actor can hold."""

    HOST = "HOST"
    SEEKER = "SEEKER"


class OtpPurpose(str, Enum):
    """The gated transition an OTP unlocks."""

    CHECKOUT = "CHECKOUT"
    RETURN = "RETURN"
