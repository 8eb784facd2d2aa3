"""Weekly shift template codec.

A template is 56 characters: seven 8-character `HHMMHHMM` segments, Sunday
first. The segment `00002359` marks a day without scheduled work. A segment
whose end is earlier than its start crosses midnight.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Sequence, Union

from ..core.exceptions import FormatError

DAY_OFF_SEGMENT = "00002359"
SEGMENT_LENGTH = 8
DAYS_PER_WEEK = 7
TEMPLATE_LENGTH = SEGMENT_LENGTH * DAYS_PER_WEEK


@dataclass(frozen=True)
class WorkWindow:
    start: time
    end: time
    crosses_midnight: bool

    def start_on(self, work_date: date) -> datetime:
        return datetime.combine(work_date, self.start)

    def end_on(self, work_date: date) -> datetime:
        end_date = work_date + timedelta(days=1) if self.crosses_midnight else work_date
        return datetime.combine(end_date, self.end)

    @property
    def duration(self) -> timedelta:
        anchor = date(2000, 1, 1)
        return self.end_on(anchor) - self.start_on(anchor)


@dataclass(frozen=True)
class DayOff:
    pass


DAY_OFF = DayOff()

DayWindow = Union[WorkWindow, DayOff]


def sunday_first_weekday(value: date) -> int:
    """Convert to 0=Sunday..6=Saturday."""
    return (value.weekday() + 1) % DAYS_PER_WEEK


def _parse_hhmm(chunk: str) -> time:
    hours, minutes = int(chunk[:2]), int(chunk[2:])
    if hours > 23 or minutes > 59:
        raise FormatError(f"Invalid HHMM value: {chunk!r}")
    return time(hours, minutes)


def _segment(template: str, weekday: int) -> str:
    if template is None or len(template) != TEMPLATE_LENGTH:
        raise FormatError(f"Template must be exactly {TEMPLATE_LENGTH} characters")
    if not 0 <= weekday < DAYS_PER_WEEK:
        raise ValueError(f"weekday must be 0..6, got {weekday}")
    offset = weekday * SEGMENT_LENGTH
    seg = template[offset:offset + SEGMENT_LENGTH]
    if not (seg.isascii() and seg.isdigit()):
        raise FormatError(f"Segment for weekday {weekday} is not numeric: {seg!r}")
    return seg


def decode(template: str, weekday: int) -> DayWindow:
    """Decode the working window of one weekday (0=Sunday)."""
    seg = _segment(template, weekday)
    if seg == DAY_OFF_SEGMENT:
        return DAY_OFF

    start = _parse_hhmm(seg[:4])
    end = _parse_hhmm(seg[4:])
    if start == end:
        raise FormatError(f"Segment for weekday {weekday} has an empty window: {seg!r}")
    return WorkWindow(start=start, end=end, crosses_midnight=end < start)


def decode_for_date(template: str, work_date: date) -> DayWindow:
    return decode(template, sunday_first_weekday(work_date))


def validate_template(template: str) -> str:
    for weekday in range(DAYS_PER_WEEK):
        decode(template, weekday)
    return template


def encode(days: Sequence[DayWindow]) -> str:
    """Build a template string from seven windows, Sunday first."""
    if len(days) != DAYS_PER_WEEK:
        raise FormatError(f"Expected {DAYS_PER_WEEK} days, got {len(days)}")

    parts: list[str] = []
    for day in days:
        if isinstance(day, DayOff):
            parts.append(DAY_OFF_SEGMENT)
        else:
            parts.append(f"{day.start:%H%M}{day.end:%H%M}")
    return validate_template("".join(parts))
