"""Datetime conversion utilities for the backend wire format."""

from datetime import UTC, datetime

from scripto.constants import WIRE_DATETIME_FORMAT


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return *value* converted to UTC, assuming UTC for naive datetimes."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_wire_datetime(value: datetime) -> str:
    """Format a datetime as ``2024-01-01T12:00:00+0000`` (UTC, no fractions)."""
    return ensure_utc(value).replace(microsecond=0).strftime(WIRE_DATETIME_FORMAT)


def parse_wire_datetime(value: str) -> datetime:
    """Parse a wire timestamp into an aware UTC datetime.

    Accepts ``+0000``, ``+00:00`` and ``Z`` offsets.

    Raises:
        ValueError: If *value* is not in the wire format.
    """
    return ensure_utc(datetime.strptime(value.strip(), WIRE_DATETIME_FORMAT))
