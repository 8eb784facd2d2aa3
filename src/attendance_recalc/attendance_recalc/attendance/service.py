from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..schedules.resolver import ScheduleResolver
from ..settings.service import SettingsService
from .attribution import claim_window, natural_window, shift_window
from .engine import StatusEngine
from .model import DailyCalculation
from .repository import AttendanceSourceRepository


class AttendanceCalculator:
    """Gathers the inputs of one (employee, date) and runs the status engine."""

    def __init__(
        self,
        *,
        resolver: ScheduleResolver,
        sources: AttendanceSourceRepository,
        settings: SettingsService,
        engine: StatusEngine | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._resolver = resolver
        self._sources = sources
        self._settings = settings
        self._engine = engine or StatusEngine()
        self._clock = clock

    def _shift_window(self, employee_id: int, work_date: date):
        resolved = self._resolver.resolve_shift(employee_id, work_date)
        exception = self._sources.get_exception(employee_id, work_date)
        return resolved, exception, shift_window(resolved, exception)

    def calculate(self, employee_id: int, work_date: date, *, now: Optional[datetime] = None) -> DailyCalculation:
        company = self._settings.get()
        rule = company.working_day_rule
        previous_date = work_date - timedelta(days=1)
        next_date = work_date + timedelta(days=1)

        resolved, exception, current = self._shift_window(employee_id, work_date)
        _, _, previous = self._shift_window(employee_id, previous_date)
        _, _, following = self._shift_window(employee_id, next_date)

        # Neighbour claims are trimmed with the same rule, so each punch lands on one date.
        current_start = natural_window(work_date, current, rule).start
        not_before = claim_window(previous_date, previous, rule, not_after=current_start).end
        not_after = natural_window(next_date, following, rule).start

        punches = self._sources.get_punches(
            employee_id,
            datetime.combine(previous_date, time.min),
            datetime.combine(next_date + timedelta(days=1), time.min),
        )
        leave = self._sources.get_approved_leave(employee_id, work_date)

        now = now or self._clock()
        calculation = self._engine.compute_day(
            employee_id,
            work_date,
            resolved,
            punches,
            company_buffer_minutes=company.buffer_time_minutes,
            leave=leave,
            exception=exception,
            working_day=rule,
            not_before=not_before,
            not_after=not_after,
            now=now,
        )
        return replace(calculation, calculated_at=now)
