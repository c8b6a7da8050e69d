"""ISO-8601 timestamp helpers. All times are normalised to UTC."""

from __future__ import annotations

from datetime import datetime, timezone


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string into a UTC-aware ``datetime``.

    A trailing ``Z`` is accepted. Naive values are assumed to be UTC.

    Args:
        value: The timestamp string.

    Returns:
        A UTC-aware :class:`datetime`.

    Raises:
        ValueError: If *value* is empty or not ISO-8601.
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid timestamp: {value!r}")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    return as_utc(datetime.fromisoformat(text))


def format_timestamp(dt: datetime) -> str:
    """Format *dt* as an ISO-8601 UTC string with millisecond precision."""
    return as_utc(dt).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def as_utc(dt: datetime) -> datetime:
    """Convert *dt* to UTC, treating a naive value as already being UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
