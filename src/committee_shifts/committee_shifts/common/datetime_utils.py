from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_month(value: str) -> date:
    """Parse YYYY-MM into the first day of that month."""
    return datetime.strptime(value, "%Y-%m").date()


def parse_hhmm(value: str) -> time:
    """Parse an HH:MM committee time string."""
    parts = (value or "").strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time string: {value!r}")
    return time(hour=int(parts[0]), minute=int(parts[1]))


def hhmm_to_minutes(value: str) -> int:
    """HH:MM -> minutes since midnight."""
    t = parse_hhmm(value)
    return t.hour * 60 + t.minute


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current wall-clock time in the organization's timezone (naive).

    Note: Wrapped so tests can patch/mocked easier.
    """
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
    return datetime.now()
