from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Sequence

from ..attendance.model import DailyCalculation
from ..attendance.service import AttendanceCalculator
from ..common.datetime_utils import iter_dates, now_local
from ..common.validators import require_date_range
from ..core.constants import ON_DEMAND_MAX_DAYS
from ..core.exceptions import ValidationError
from .model import RangeRead
from .repository import CalculationRepository

logger = logging.getLogger(__name__)


class CalculationService:
    def __init__(
        self,
        calculations: CalculationRepository,
        calculator: AttendanceCalculator,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._calculations = calculations
        self._calculator = calculator
        self._clock = clock

    def read_range(self, employee_ids: Sequence[int], start: date, end: date) -> RangeRead:
        """Cache-only batch read; never computes."""
        if not employee_ids:
            raise ValidationError("employee_ids is required")
        require_date_range(start, end)

        ids = sorted({int(i) for i in employee_ids})
        rows = self._calculations.get_range(ids, start, end)

        seen: Dict[int, set] = {i: set() for i in ids}
        for row in rows:
            seen.setdefault(row.employee_id, set()).add(row.work_date)

        missing: Dict[int, List[date]] = {}
        for employee_id in ids:
            gaps = [d for d in iter_dates(start, end) if d not in seen[employee_id]]
            if gaps:
                missing[employee_id] = gaps
        return RangeRead(rows=list(rows), missing=missing)

    def read_employee(self, employee_id: int, start: date, end: date) -> List[DailyCalculation]:
        """Single-employee read that fills cache misses synchronously.

        Only past and current dates are computed; future dates stay absent.
        Rows computed while their shift was still running are recomputed once
        it has ended.
        """

        require_date_range(start, end, max_days=ON_DEMAND_MAX_DAYS)
        now = self._clock()
        today = now.date()

        cached = {
            row.work_date: row
            for row in self._calculations.get_range([int(employee_id)], start, end)
            if not row.is_provisional(now)
        }
        computed = [
            self._calculator.calculate(int(employee_id), d, now=now)
            for d in iter_dates(start, min(end, today))
            if d not in cached
        ]
        if computed:
            logger.info("Computed %s missing day(s) on demand for employee %s", len(computed), employee_id)
            for row in self._calculations.put_many(computed):
                cached[row.work_date] = row

        return [cached[d] for d in sorted(cached)]

    def recompute(self, employee_id: int, work_date: date) -> DailyCalculation:
        calculation = self._calculator.calculate(int(employee_id), work_date)
        return self._calculations.put(calculation)
