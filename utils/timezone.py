"""UTC-everywhere time handling. Invoice dates are plain ISO calendar days."""

from datetime import date, datetime, timedelta, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def today_iso() -> str:
    """Current UTC calendar day as YYYY-MM-DD."""
    return now_utc().date().isoformat()


def days_from_today_iso(days: int) -> str:
    """UTC calendar day `days` from today as YYYY-MM-DD."""
    return (now_utc().date() + timedelta(days=days)).isoformat()


def parse_day(value: str) -> date | None:
    """
    Parse a YYYY-MM-DD string (a trailing time part is ignored).

    Returns None for empty or unparseable input; invoice dates are free-form
    strings entered by the user and are never trusted to be valid.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None
