"""Time utilities for timezone-aware UTC datetimes."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for created/updated stamps."""
    return datetime.now(UTC)


def today() -> date:
    return utc_now().date()
