from __future__ import annotations
from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_db_utc(dt: datetime) -> datetime:
    """Normalise a datetime for naive UTC columns (TIMESTAMP WITHOUT TIME ZONE).

    - Naive datetimes are assumed to already be UTC.
    - Aware datetimes are converted to UTC and stripped of tzinfo.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def now_db_utc() -> datetime:
    """Return naive UTC time for database columns."""
    return now_utc().replace(tzinfo=None)


def expires_at_from(expires_in: int | None, *, now: datetime | None = None) -> datetime | None:
    """Turn a provider `expires_in` (seconds) into an absolute naive UTC timestamp.

    Lifetimes past the datetime range are stored as no expiry.
    """
    if expires_in is None:
        return None
    try:
        return to_db_utc(now or now_db_utc()) + timedelta(seconds=int(expires_in))
    except OverflowError:
        return None


def iso_utc(dt: datetime | None = None) -> str:
    """Return ISO-8601 string in UTC for the given datetime (or now)."""
    if dt is None:
        return now_utc().isoformat()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()
