"""Time utilities with timezone-aware datetimes."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def isoformat(value: datetime | str | None) -> str | None:
    """ISO string for a datetime, passing strings and None through."""
    if value is None or isinstance(value, str):
        return value
    return value.isoformat()
