"""Punch attribution: which punches belong to which working day.

Every date claims a half-open window `[start, end)` of punch times. Windows of
consecutive dates never overlap, so a single punch is counted at most once.
A scheduled day opens `EARLY_ARRIVAL_MINUTES` before its shift start. A day
without work claims the working day (boundary to boundary) when the company
working-day feature is on, otherwise the calendar day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

from ..core.constants import DEFAULT_WORKING_DAY_START, EARLY_ARRIVAL_MINUTES
from ..schedules.resolver import Resolution, ResolvedShift
from ..shifts.codec import WorkWindow
from .model import PunchLog, ScheduleException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkingDayRule:
    start_time: time = DEFAULT_WORKING_DAY_START
    enabled: bool = False

    def boundary(self, work_date: date) -> datetime:
        return datetime.combine(work_date, self.start_time)


@dataclass(frozen=True)
class ClaimWindow:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def _midnight(work_date: date) -> datetime:
    return datetime.combine(work_date, time.min)


def shift_window(resolution: Resolution, exception: Optional[ScheduleException]) -> Optional[WorkWindow]:
    """The window actually worked on the date, after applying an exception.

    Returns None for days without scheduled work.
    """

    if exception is not None:
        if exception.is_day_off:
            return None
        if exception.start_time is not None and exception.end_time is not None:
            if exception.start_time != exception.end_time:
                return WorkWindow(
                    start=exception.start_time,
                    end=exception.end_time,
                    crosses_midnight=exception.end_time < exception.start_time,
                )

    window = resolution.window if isinstance(resolution, ResolvedShift) else None
    return window if isinstance(window, WorkWindow) else None


def natural_window(work_date: date, shift: Optional[WorkWindow], rule: WorkingDayRule) -> ClaimWindow:
    next_date = work_date + timedelta(days=1)
    if shift is None:
        if rule.enabled:
            return ClaimWindow(rule.boundary(work_date), rule.boundary(next_date))
        return ClaimWindow(_midnight(work_date), _midnight(next_date))

    shift_start = shift.start_on(work_date)
    shift_end = shift.end_on(work_date)
    start = shift_start - timedelta(minutes=EARLY_ARRIVAL_MINUTES)
    if shift.crosses_midnight:
        end = max(shift_end, rule.boundary(next_date))
    elif rule.enabled:
        end = rule.boundary(next_date)
    else:
        end = _midnight(next_date)
    # Leave room for the same shift's early arrival on the next date.
    end = min(end, shift_start + timedelta(days=1) - timedelta(minutes=EARLY_ARRIVAL_MINUTES))
    return ClaimWindow(start, max(end, shift_end))


def claim_window(
    work_date: date,
    shift: Optional[WorkWindow],
    rule: WorkingDayRule,
    *,
    not_before: Optional[datetime] = None,
    not_after: Optional[datetime] = None,
) -> ClaimWindow:
    """Claim window of a date trimmed against its neighbours.

    `not_before` is the previous date's claim end. `not_after` is the next
    date's natural start; a scheduled shift still keeps punches up to its own
    scheduled end.
    """

    natural = natural_window(work_date, shift, rule)
    start, end = natural.start, natural.end
    if not_after is not None:
        end = min(end, not_after)
        if shift is not None:
            end = max(end, shift.end_on(work_date))
    if not_before is not None:
        start = max(start, not_before)
    return ClaimWindow(start, end)


def select_punches(punches: Iterable[PunchLog], window: ClaimWindow) -> List[datetime]:
    """Sorted punch times inside the window; malformed timestamps are skipped."""
    times: list[datetime] = []
    for punch in punches:
        moment = punch.punch_time
        if not isinstance(moment, datetime):
            logger.warning(
                "Skipping punch %s for employee %s: malformed timestamp %r",
                punch.log_id,
                punch.employee_id,
                moment,
            )
            continue
        if window.contains(moment):
            times.append(moment)
    times.sort()
    return times
