from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import LeaveRecord, PunchLog, ScheduleException


class AttendanceSourceRepository(Protocol):
    """Read access to the raw facts a day's calculation depends on."""

    def get_punches(self, employee_id: int, start: datetime, end: datetime) -> Sequence[PunchLog]:
        """Punches with start <= punch_time < end, ordered by time."""

        raise NotImplementedError

    def get_approved_leave(self, employee_id: int, work_date: date) -> Optional[LeaveRecord]:
        raise NotImplementedError

    def get_exception(self, employee_id: int, work_date: date) -> Optional[ScheduleException]:
        raise NotImplementedError
