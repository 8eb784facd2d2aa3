from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class DepartmentSchedule:
    department_id: int
    template_ids: Tuple[Optional[int], Optional[int], Optional[int]] = (None, None, None)


@dataclass(frozen=True)
class ScheduleOverride:
    """A time-bounded substitute shift template for one employee.

    `original_template_id` is the standing individual assignment that was in
    place before the override (None = the employee followed the department
    default) and is restored on revert.
    """

    override_id: int
    employee_id: int
    override_template_id: int
    original_template_id: Optional[int]
    active_from: date
    active_until: date
    label: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    ended_by: Optional[str] = None

    def covers(self, work_date: date) -> bool:
        return self.is_active and self.active_from <= work_date <= self.active_until

    def to_dict(self) -> dict:
        return {
            "id": self.override_id,
            "employee_id": self.employee_id,
            "override_template_id": self.override_template_id,
            "original_template_id": self.original_template_id,
            "active_from": self.active_from.isoformat(),
            "active_until": self.active_until.isoformat(),
            "label": self.label,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(sep=" ") if self.created_at else None,
            "ended_at": self.ended_at.isoformat(sep=" ") if self.ended_at else None,
            "ended_by": self.ended_by,
        }


@dataclass(frozen=True)
class NewOverride:
    employee_id: int
    override_template_id: int
    original_template_id: Optional[int]
    active_from: date
    active_until: date
    label: str
