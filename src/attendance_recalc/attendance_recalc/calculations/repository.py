from __future__ import annotations

from datetime import date, datetime
from typing import Protocol, Sequence, Tuple

from ..attendance.model import DailyCalculation


class CalculationRepository(Protocol):
    def get_range(self, employee_ids: Sequence[int], start: date, end: date) -> Sequence[DailyCalculation]:
        """All cached rows for the employees within [start, end], one query."""

        raise NotImplementedError

    def put(self, calculation: DailyCalculation) -> DailyCalculation:
        """Upsert by (employee_id, work_date).

        Keeps a `calculated_at` set by the calculator, else stamps the current time.
        """

        raise NotImplementedError

    def put_many(self, calculations: Sequence[DailyCalculation]) -> Sequence[DailyCalculation]:
        raise NotImplementedError

    def list_provisional(self, *, now: datetime) -> Sequence[Tuple[int, date]]:
        """Keys of rows calculated before their shift ended, where the shift has ended by `now`."""

        raise NotImplementedError
