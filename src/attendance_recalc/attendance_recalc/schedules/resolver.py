"""Schedule resolution: which shift template applies to an employee on a date.

Precedence: active override covering the date, then the employee's individual
assignment, then the department schedule. Within a slot group slot 1 is
primary and slots 2/3 are only consulted when slot 1 is empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..core.enums import ScheduleSource
from ..core.exceptions import DataIntegrityError, NotFoundError
from ..employees.repository import EmployeeRepository
from ..shifts.codec import DayOff, DayWindow, WorkWindow, decode_for_date
from ..shifts.model import ShiftTemplate
from ..shifts.repository import ShiftRepository
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedShift:
    work_date: date
    template: ShiftTemplate
    source: ScheduleSource
    window: DayWindow

    @property
    def is_day_off(self) -> bool:
        return isinstance(self.window, DayOff)

    @property
    def start(self) -> Optional[datetime]:
        if isinstance(self.window, WorkWindow):
            return self.window.start_on(self.work_date)
        return None

    @property
    def end(self) -> Optional[datetime]:
        if isinstance(self.window, WorkWindow):
            return self.window.end_on(self.work_date)
        return None

    @property
    def buffer_minutes(self) -> Optional[int]:
        return self.template.buffer_minutes


@dataclass(frozen=True)
class NoSchedule:
    pass


NO_SCHEDULE = NoSchedule()

Resolution = Union[ResolvedShift, NoSchedule]


def pick_slot(template_ids: Sequence[Optional[int]]) -> Optional[int]:
    """Slot 1 when set, otherwise the first non-empty of slots 2/3."""
    for template_id in template_ids:
        if template_id is not None:
            return int(template_id)
    return None


class ScheduleResolver:
    def __init__(
        self,
        *,
        employees: EmployeeRepository,
        schedules: ScheduleRepository,
        shifts: ShiftRepository,
    ):
        self._employees = employees
        self._schedules = schedules
        self._shifts = shifts

    def resolve_shift(self, employee_id: int, work_date: date) -> Resolution:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")

        individual = list(employee.individual_template_ids)
        override = self._schedules.get_active_override(employee.employee_id)
        if override is not None:
            if override.covers(work_date):
                return self._resolve_template(
                    employee.employee_id, work_date, override.override_template_id, ScheduleSource.OVERRIDE
                )
            # Slot 1 holds the override template while it is active; outside the
            # override dates the standing assignment applies.
            individual[0] = override.original_template_id

        template_id = pick_slot(individual)
        if template_id is not None:
            return self._resolve_template(employee.employee_id, work_date, template_id, ScheduleSource.INDIVIDUAL)

        if employee.department_id is not None:
            department = self._schedules.get_department_schedule(employee.department_id)
            if department is not None:
                template_id = pick_slot(department.template_ids)
                if template_id is not None:
                    return self._resolve_template(
                        employee.employee_id, work_date, template_id, ScheduleSource.DEPARTMENT
                    )

        return NO_SCHEDULE

    def _resolve_template(
        self, employee_id: int, work_date: date, template_id: int, source: ScheduleSource
    ) -> ResolvedShift:
        template = self._shifts.get_by_id(template_id)
        if template is None:
            logger.error(
                "Employee %s references missing shift template %s (%s)", employee_id, template_id, source.value
            )
            raise DataIntegrityError(
                f"Shift template {template_id} referenced by employee {employee_id} ({source.value}) does not exist"
            )
        return ResolvedShift(
            work_date=work_date,
            template=template,
            source=source,
            window=decode_for_date(template.tz_string, work_date),
        )
