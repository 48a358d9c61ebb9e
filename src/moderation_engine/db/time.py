"""Time utilities for database models."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from backends that drop tzinfo."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def start_of_day(value: datetime) -> datetime:
    """Return midnight (UTC) of the calendar day containing ``value``."""
    value = ensure_utc(value) or value
    return value.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
