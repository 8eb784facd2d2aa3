from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import DepartmentSchedule, NewOverride, ScheduleOverride


class ScheduleRepository(Protocol):
    def get_department_schedule(self, department_id: int) -> Optional[DepartmentSchedule]:
        raise NotImplementedError

    def set_department_schedule(self, schedule: DepartmentSchedule) -> None:
        raise NotImplementedError

    def get_active_override(self, employee_id: int) -> Optional[ScheduleOverride]:
        raise NotImplementedError

    def list_active_overrides(self, employee_ids: Optional[Sequence[int]] = None) -> Sequence[ScheduleOverride]:
        raise NotImplementedError

    def replace_active_override(self, new: NewOverride, *, now: datetime) -> int:
        """Deactivate the employee's active override, insert `new` and point
        the employee's individual slot 1 at the override template.

        Runs as one transaction. Returns the new override id.
        """

        raise NotImplementedError

    def end_override(self, override: ScheduleOverride, *, now: datetime, ended_by: str) -> None:
        """Deactivate `override` and restore its original individual slot 1.

        Runs as one transaction.
        """

        raise NotImplementedError
