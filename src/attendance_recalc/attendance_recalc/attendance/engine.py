"""Attendance status engine.

Pure computation of one employee's day from the resolved shift, the day's
punches, leave and schedule exceptions. Same inputs always give the same
`DailyCalculation`; the calculator stamps `calculated_at` with the `now` it
used, so rows computed while a shift was running can be found later.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Sequence

from ..core.constants import DEFAULT_BUFFER_MINUTES, DUPLICATE_SCAN_MINUTES, MAX_SHIFT_HOURS
from ..core.enums import AttendanceStatus
from ..common.datetime_utils import hours_between
from ..schedules.resolver import NoSchedule, Resolution, ResolvedShift
from .attribution import ClaimWindow, WorkingDayRule, claim_window, select_punches, shift_window
from .model import DailyCalculation, LeaveRecord, PunchLog, ScheduleException


class DayKind(Enum):
    EXCEPTION_DAY_OFF = "exception_day_off"
    ON_LEAVE = "on_leave"
    NO_SCHEDULE = "no_schedule"
    DAY_OFF = "day_off"
    WORKING_DAY = "working_day"


@dataclass(frozen=True)
class _Shift:
    name: Optional[str]
    start: datetime
    end: datetime
    grace: timedelta
    half_day: bool


def _first_last(times: Sequence[datetime]):
    """(in, out) where out is None unless a later punch is a real check-out."""
    if not times:
        return None, None
    first, last = times[0], times[-1]
    if last - first < timedelta(minutes=DUPLICATE_SCAN_MINUTES):
        return first, None
    return first, last


def _overlap_hours(start: datetime, end: datetime, lo: datetime, hi: datetime) -> float:
    return hours_between(max(start, lo), min(end, hi))


class StatusEngine:
    def classify(
        self,
        resolved: Resolution,
        *,
        punches: Sequence[datetime],
        leave: Optional[LeaveRecord],
        exception: Optional[ScheduleException],
    ) -> DayKind:
        if exception is not None and exception.is_day_off:
            return DayKind.EXCEPTION_DAY_OFF
        if leave is not None and not punches:
            return DayKind.ON_LEAVE
        if shift_window(resolved, exception) is not None:
            return DayKind.WORKING_DAY
        if isinstance(resolved, NoSchedule):
            return DayKind.NO_SCHEDULE
        return DayKind.DAY_OFF

    def compute_day(
        self,
        employee_id: int,
        work_date: date,
        resolved: Resolution,
        punches: Sequence[PunchLog],
        *,
        company_buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
        leave: Optional[LeaveRecord] = None,
        exception: Optional[ScheduleException] = None,
        working_day: Optional[WorkingDayRule] = None,
        not_before: Optional[datetime] = None,
        not_after: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> DailyCalculation:
        rule = working_day or WorkingDayRule()
        window = shift_window(resolved, exception)
        claim = claim_window(work_date, window, rule, not_before=not_before, not_after=not_after)
        times = select_punches(punches, claim)
        if leave is not None and not leave.covers(work_date):
            leave = None

        kind = self.classify(resolved, punches=times, leave=leave, exception=exception)
        shift_name = resolved.template.name if isinstance(resolved, ResolvedShift) else None

        if kind is DayKind.EXCEPTION_DAY_OFF:
            return DailyCalculation(employee_id, work_date, AttendanceStatus.DAY_OFF, shift_name=shift_name)
        if kind is DayKind.ON_LEAVE:
            return DailyCalculation(employee_id, work_date, AttendanceStatus.ON_LEAVE, shift_name=shift_name)
        if kind is DayKind.NO_SCHEDULE:
            return self._unscheduled(
                employee_id, work_date, times, AttendanceStatus.NO_SCHEDULE, AttendanceStatus.PRESENT, None
            )
        if kind is DayKind.DAY_OFF:
            return self._unscheduled(
                employee_id, work_date, times, AttendanceStatus.DAY_OFF, AttendanceStatus.WORKED_ON_DAY_OFF, shift_name
            )
        if kind is DayKind.WORKING_DAY:
            assert window is not None
            buffer_minutes = resolved.buffer_minutes if isinstance(resolved, ResolvedShift) else None
            grace = buffer_minutes if buffer_minutes is not None else company_buffer_minutes
            start = window.start_on(work_date)
            end = window.end_on(work_date)
            half_day = bool(exception and exception.is_half_day)
            if half_day:
                end = start + (end - start) / 2
            shift = _Shift(name=shift_name, start=start, end=end, grace=timedelta(minutes=int(grace)), half_day=half_day)
            return self._working_day(employee_id, work_date, times, shift, claim, now)
        raise AssertionError(f"Unhandled day kind: {kind}")

    def _unscheduled(
        self,
        employee_id: int,
        work_date: date,
        times: List[datetime],
        idle_status: AttendanceStatus,
        worked_status: AttendanceStatus,
        shift_name: Optional[str],
    ) -> DailyCalculation:
        if not times:
            return DailyCalculation(employee_id, work_date, idle_status, shift_name=shift_name)

        in_time, out_time = _first_last(times)
        if out_time is None:
            return DailyCalculation(
                employee_id, work_date, AttendanceStatus.PUNCH_OUT_MISSING, in_time=in_time, shift_name=shift_name
            )
        hours = hours_between(in_time, out_time)
        return DailyCalculation(
            employee_id,
            work_date,
            worked_status,
            in_time=in_time,
            out_time=out_time,
            total_hours=hours,
            regular_hours=hours,
            shift_name=shift_name,
        )

    def _working_day(
        self,
        employee_id: int,
        work_date: date,
        times: List[datetime],
        shift: _Shift,
        claim: ClaimWindow,
        now: Optional[datetime],
    ) -> DailyCalculation:
        def result(
            status: AttendanceStatus,
            *,
            in_time: Optional[datetime] = None,
            out_time: Optional[datetime] = None,
            regular_hours: float = 0.0,
            overtime_hours: float = 0.0,
        ) -> DailyCalculation:
            if shift.half_day:
                status = AttendanceStatus.HALF_DAY
            return DailyCalculation(
                employee_id,
                work_date,
                status,
                in_time=in_time,
                out_time=out_time,
                total_hours=regular_hours + overtime_hours,
                regular_hours=regular_hours,
                overtime_hours=overtime_hours,
                shift_name=shift.name,
                shift_start=shift.start,
                shift_end=shift.end,
            )

        if not times:
            return result(AttendanceStatus.ABSENT)

        in_time, out_time = _first_last(times)
        if in_time > shift.end:
            hours = hours_between(in_time, out_time) if out_time else 0.0
            return result(AttendanceStatus.OUT_OF_SCHEDULE, in_time=in_time, out_time=out_time, regular_hours=hours)

        on_time = in_time <= shift.start + shift.grace
        lateness = AttendanceStatus.ON_TIME if on_time else AttendanceStatus.LATE_IN
        credited_from = shift.start if on_time else in_time

        if now is not None and now < shift.end:
            # Shift still running; the last punch may not be the check-out yet.
            return result(lateness, in_time=in_time)

        if out_time is not None and out_time < shift.end and out_time - in_time > timedelta(hours=MAX_SHIFT_HOURS):
            out_time = None

        if out_time is None:
            return result(
                AttendanceStatus.PUNCH_OUT_MISSING,
                in_time=in_time,
                regular_hours=hours_between(credited_from, shift.end),
            )

        regular = _overlap_hours(credited_from, out_time, shift.start, shift.end)
        overtime = _overlap_hours(credited_from, out_time, shift.end, claim.end)
        return result(lateness, in_time=in_time, out_time=out_time, regular_hours=regular, overtime_hours=overtime)
