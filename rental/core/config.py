# rental/core/config.py
from decimal import Decimal
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import BRAND_NAME


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./rental.db",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL",
    )
    db_echo: bool = Field(default=False, description="Echo SQL statements to the log")

    # Email settings
    email_provider: Literal["console", "resend"] = Field(
        default="console",
        alias="EMAIL_PROVIDER",
        description="Email provider name",
    )
    resend_api_key: Optional[SecretStr] = Field(
        default=None,
        alias="RESEND_API_KEY",
        description="API key for Resend provider (optional)",
    )
    from_email: str = "bookings@rental.example.com"
    from_name: str = BRAND_NAME

    # Booking OTPs
    otp_length: int = Field(default=6, description="Number of digits in a booking OTP")
    return_otp_ttl_minutes: int = Field(
        default=20,
        description="Minutes a return OTP stays valid after the host initiates a return",
    )

    # Settlement
    tax_rate: Decimal = Field(
        default=Decimal("0.18"),
        description="Flat tax rate applied to the invoice subtotal",
    )

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("otp_length")
    @classmethod
    def validate_otp_length(cls, v: int) -> int:
        if not 4 <= v <= 10:
            raise ValueError("otp_length must be between 4 and 10 digits")
        return v

    @field_validator("tax_rate")
    @classmethod
    def validate_tax_rate(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("tax_rate must not be negative")
        return v

    @field_validator("max_page_size")
    @classmethod
    def validate_max_page_size(cls, v: int, info: ValidationInfo) -> int:
        default_size = info.data.get("default_page_size", 1)
        if v < default_size:
            raise ValueError("max_page_size must be at least default_page_size")
        return v

    def get_database_url(self) -> str:
        """Get the database URL for the current process."""
        return self.database_url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
