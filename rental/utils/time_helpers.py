from datetime import datetime, time, timedelta, timezone

_MICROSECONDS_PER_HOUR = 3_600_000_000


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day_utc(value: datetime) -> datetime:
    """00:00:00.000000 UTC on the UTC date of ``value``."""
    return datetime.combine(ensure_utc(value).date(), time.min, tzinfo=timezone.utc)


def end_of_day_utc(value: datetime) -> datetime:
    """23:59:59.999999 UTC on the UTC date of ``value``."""
    return datetime.combine(ensure_utc(value).date(), time.max, tzinfo=timezone.utc)


def ceil_hours(duration: timedelta) -> int:
    """Whole hours covering ``duration``; zero or negative durations give 0."""
    micros = duration // timedelta(microseconds=1)
    if micros <= 0:
        return 0
    return -(-micros // _MICROSECONDS_PER_HOUR)
