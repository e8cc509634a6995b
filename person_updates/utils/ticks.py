"""Conversion between UTC datetimes and tick counts.

A tick is 100 nanoseconds; tick 0 is 0001-01-01T00:00:00 UTC. This is the
encoding used by the cursor file.
"""

from datetime import datetime, timedelta, timezone

TICKS_PER_SECOND = 10_000_000
TICKS_PER_MICROSECOND = 10

_EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def datetime_to_ticks(value: datetime) -> int:
    """Convert a datetime to a tick count.

    Args:
        value: Datetime to convert (naive values are taken as UTC)

    Returns:
        Number of 100ns intervals since 0001-01-01 UTC
    """
    delta = as_utc(value) - _EPOCH
    microseconds = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    return microseconds * TICKS_PER_MICROSECOND


def ticks_to_datetime(ticks: int) -> datetime:
    """Convert a tick count to an aware UTC datetime.

    Sub-microsecond precision is truncated.

    Raises:
        ValueError: If ticks is negative or beyond datetime.max
    """
    if ticks < 0:
        raise ValueError(f"Tick count cannot be negative: {ticks}")
    try:
        return _EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)
    except OverflowError as e:
        raise ValueError(f"Tick count out of range: {ticks}") from e
