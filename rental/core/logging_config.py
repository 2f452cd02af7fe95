"""Process-wide logging setup."""

import logging

from .config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: int | None = None) -> None:
    """Install the root handler used by every rental.* logger."""
    if level is None:
        level = logging.DEBUG if settings.environment == "development" else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # SQL echo is controlled by settings.db_echo, keep the engine logger quiet otherwise
    if not settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
