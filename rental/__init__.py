"""Vehicle rental booking core: lifecycle, OTP gating and settlement."""

__version__ = "0.1.0"
