"""Datetime utilities for common operations."""

from datetime import datetime, date, timedelta, timezone
from typing import Optional


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Make a datetime timezone-aware.

    Naive values (e.g. read back from SQLite) are assumed to be UTC.

    Args:
        dt: Datetime or None

    Returns:
        Aware datetime in UTC, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def days_ago(days: int, reference: Optional[datetime] = None) -> datetime:
    """Datetime `days` days before `reference` (default: now)."""
    return (reference or now()) - timedelta(days=days)


def days_from_now(days: int, reference: Optional[datetime] = None) -> datetime:
    """Datetime `days` days after `reference` (default: now)."""
    return (reference or now()) + timedelta(days=days)


def days_between(start: datetime | date, end: datetime | date) -> int:
    """
    Calculate number of whole days between two dates.

    Args:
        start: Start date
        end: End date

    Returns:
        Number of days
    """
    if isinstance(start, datetime):
        start = ensure_utc(start).date()
    if isinstance(end, datetime):
        end = ensure_utc(end).date()

    return (end - start).days


def is_future(dt: datetime, reference: Optional[datetime] = None) -> bool:
    """
    Check if datetime is strictly in the future.

    Args:
        dt: Datetime to check
        reference: Point in time to compare against (default: now)

    Returns:
        True if strictly after the reference
    """
    return ensure_utc(dt) > (reference or now())
