from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterator


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM string into time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date in [start, end]."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def hours_between(start: datetime, end: datetime) -> float:
    """Decimal hours from start to end, never negative."""
    return max(0.0, (end - start).total_seconds() / 3600.0)
