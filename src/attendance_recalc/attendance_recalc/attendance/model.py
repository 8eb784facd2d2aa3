from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from ..core.enums import AttendanceStatus, LeaveStatus, PunchStatus


@dataclass(frozen=True)
class PunchLog:
    """Raw device punch. `punch_time` is naive, in the reference timezone."""

    log_id: int
    employee_id: int
    punch_time: datetime
    status_code: PunchStatus = PunchStatus.CHECK_IN
    verify_mode: int = 0


@dataclass(frozen=True)
class LeaveRecord:
    employee_id: int
    start_date: date
    end_date: date
    status: LeaveStatus

    def covers(self, work_date: date) -> bool:
        return self.status == LeaveStatus.APPROVED and self.start_date <= work_date <= self.end_date


@dataclass(frozen=True)
class ScheduleException:
    """One-off change for a single employee and date.

    `start_time`/`end_time` replace the shift window when both are set.
    """

    employee_id: int
    work_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_day_off: bool = False
    is_half_day: bool = False


def _hours(value: float) -> float:
    return round(value, 2)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(sep=" ") if value else None


@dataclass(frozen=True)
class DailyCalculation:
    """Derived per-day attendance result (the calculation cache row)."""

    employee_id: int
    work_date: date
    status: AttendanceStatus
    in_time: Optional[datetime] = None
    out_time: Optional[datetime] = None
    total_hours: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    shift_name: Optional[str] = None
    shift_start: Optional[datetime] = None
    shift_end: Optional[datetime] = None
    calculated_at: Optional[datetime] = None

    def is_provisional(self, now: datetime) -> bool:
        """Computed before its shift ended, and the shift has ended since.

        Such a row may still say On-Time with no check-out; it must be recomputed.
        """
        if self.shift_end is None or self.calculated_at is None:
            return False
        return self.calculated_at < self.shift_end <= now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "work_date": self.work_date.isoformat(),
            "status": self.status.value,
            "in_time": _iso(self.in_time),
            "out_time": _iso(self.out_time),
            "total_hours": _hours(self.total_hours),
            "regular_hours": _hours(self.regular_hours),
            "overtime_hours": _hours(self.overtime_hours),
            "shift_name": self.shift_name,
            "shift_start": _iso(self.shift_start),
            "shift_end": _iso(self.shift_end),
            "calculated_at": _iso(self.calculated_at),
        }
