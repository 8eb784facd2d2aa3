from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_int_range
from ..core.constants import (
    DEFAULT_RECALC_LOOKBACK_DAYS,
    OVERRIDE_MAX_BACKDATE_DAYS,
    TEMPLATE_ID_MAX,
    TEMPLATE_ID_MIN,
    TEMPLATE_SLOTS,
)
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..recalc.dispatcher import QueueDrainDispatcher
from ..recalc.service import RecalcQueueService
from ..shifts.repository import ShiftRepository
from .model import DepartmentSchedule, NewOverride, ScheduleOverride
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

REVERTED_BY_ADMIN = "admin"


@dataclass(frozen=True)
class OverrideChange:
    override: ScheduleOverride
    days_queued: int
    fired: int = 0


def _normalize_slots(shifts: ShiftRepository, template_ids: Sequence[Optional[int]]) -> tuple:
    if len(template_ids) > TEMPLATE_SLOTS:
        raise ValidationError(f"At most {TEMPLATE_SLOTS} shift templates can be assigned")

    slots: List[Optional[int]] = []
    for value in template_ids:
        if value in (None, ""):
            slots.append(None)
            continue
        template_id = require_int_range(value, "template_id", min_value=TEMPLATE_ID_MIN, max_value=TEMPLATE_ID_MAX)
        if shifts.get_by_id(template_id) is None:
            raise NotFoundError(f"Shift template {template_id} not found")
        slots.append(template_id)
    slots.extend([None] * (TEMPLATE_SLOTS - len(slots)))
    return tuple(slots)


class OverrideService:
    """Apply and revert temporary schedule overrides.

    Order per employee: deactivate old, insert new and update the standing
    assignment (one transaction), then enqueue the affected dates, then kick
    the dispatcher.
    """

    def __init__(
        self,
        *,
        schedules: ScheduleRepository,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        queue: RecalcQueueService,
        dispatcher: QueueDrainDispatcher | None = None,
        max_backdate_days: int = OVERRIDE_MAX_BACKDATE_DAYS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._schedules = schedules
        self._employees = employees
        self._shifts = shifts
        self._queue = queue
        self._dispatcher = dispatcher
        self._max_backdate_days = int(max_backdate_days)
        self._clock = clock

    def list_active(self, employee_ids: Optional[Sequence[int]] = None) -> Sequence[ScheduleOverride]:
        return self._schedules.list_active_overrides(employee_ids)

    def _validate_window(self, active_from: date, active_until: date, today: date) -> None:
        if active_from is None or active_until is None:
            raise ValidationError("active_from and active_until are required")
        if active_from > active_until:
            raise ValidationError("active_from must not be after active_until")
        if (today - active_from).days > self._max_backdate_days:
            raise ValidationError(f"active_from cannot be more than {self._max_backdate_days} days in the past")

    def _enqueue_through_today(self, employee_id: int, date_from: date, today: date) -> int:
        if date_from > today:
            return 0
        return self._queue.enqueue_range(employee_id, date_from, today)

    def _drain(self) -> int:
        if self._dispatcher is None:
            return 0
        return self._dispatcher.drain().fired

    def _apply_one(
        self, employee_id: int, template_id: int, active_from: date, active_until: date, label: str, now: datetime
    ) -> tuple:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")

        current = self._schedules.get_active_override(employee.employee_id)
        # A superseded override keeps pointing at the assignment that stood before any override.
        original = current.original_template_id if current else employee.primary_template_id

        new = NewOverride(
            employee_id=employee.employee_id,
            override_template_id=template_id,
            original_template_id=original,
            active_from=active_from,
            active_until=active_until,
            label=label,
        )
        override_id = self._schedules.replace_active_override(new, now=now)
        logger.info(
            "Override %s applied to employee %s: template %s from %s to %s",
            override_id,
            employee.employee_id,
            template_id,
            active_from,
            active_until,
        )

        recalc_from = min(active_from, current.active_from) if current else active_from
        days = self._enqueue_through_today(employee.employee_id, recalc_from, now.date())
        override = ScheduleOverride(override_id=override_id, created_at=now, **asdict(new))
        return override, days

    def apply(
        self,
        *,
        employee_ids: Sequence[int],
        template_id: int,
        active_from: date,
        active_until: date,
        label: Optional[str] = None,
    ) -> List[OverrideChange]:
        if not employee_ids:
            raise ValidationError("employee_ids is required")
        template_id = require_int_range(template_id, "template_id", min_value=TEMPLATE_ID_MIN, max_value=TEMPLATE_ID_MAX)
        if self._shifts.get_by_id(template_id) is None:
            raise NotFoundError(f"Shift template {template_id} not found")

        now = self._clock()
        self._validate_window(active_from, active_until, now.date())
        label = (label or "").strip() or f"Override until {active_until.isoformat()}"

        applied = [
            self._apply_one(int(employee_id), template_id, active_from, active_until, label, now)
            for employee_id in dict.fromkeys(employee_ids)
        ]
        fired = self._drain()
        return [OverrideChange(override=o, days_queued=days, fired=fired) for o, days in applied]

    def revert(self, *, employee_id: int) -> OverrideChange:
        current = self._schedules.get_active_override(int(employee_id))
        if current is None:
            raise NotFoundError(f"Employee {employee_id} has no active schedule override")

        now = self._clock()
        self._schedules.end_override(current, now=now, ended_by=REVERTED_BY_ADMIN)
        logger.info(
            "Override %s reverted for employee %s; template %s restored",
            current.override_id,
            current.employee_id,
            current.original_template_id,
        )

        days = self._enqueue_through_today(current.employee_id, current.active_from, now.date())
        ended = replace(current, is_active=False, ended_at=now, ended_by=REVERTED_BY_ADMIN)
        return OverrideChange(override=ended, days_queued=days, fired=self._drain())


class ScheduleService:
    """Standing schedule edits (department slots, individual slots)."""

    def __init__(
        self,
        *,
        schedules: ScheduleRepository,
        employees: EmployeeRepository,
        shifts: ShiftRepository,
        queue: RecalcQueueService,
        dispatcher: QueueDrainDispatcher | None = None,
        lookback_days: int = DEFAULT_RECALC_LOOKBACK_DAYS,
    ):
        self._schedules = schedules
        self._employees = employees
        self._shifts = shifts
        self._queue = queue
        self._dispatcher = dispatcher
        self._lookback_days = int(lookback_days)

    def _recalculate(self, employee_ids: Sequence[int]) -> tuple:
        days = self._queue.enqueue_recent(employee_ids, days=self._lookback_days)
        fired = self._dispatcher.drain().fired if self._dispatcher and days else 0
        return days, fired

    def set_department_schedule(self, department_id: int, template_ids: Sequence[Optional[int]]) -> tuple:
        """Returns (days_queued, workers_fired)."""
        if int(department_id) <= 0:
            raise ValidationError("department_id is invalid")
        slots = _normalize_slots(self._shifts, template_ids)

        self._schedules.set_department_schedule(DepartmentSchedule(department_id=int(department_id), template_ids=slots))
        logger.info("Department %s schedule set to %s", department_id, slots)
        return self._recalculate(self._employees.list_ids_for_department(int(department_id)))

    def assign_individual(self, employee_id: int, template_ids: Sequence[Optional[int]]) -> tuple:
        """Returns (days_queued, workers_fired)."""
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        if self._schedules.get_active_override(employee.employee_id) is not None:
            raise ValidationError("Employee has an active schedule override; revert it before changing the schedule")

        slots = _normalize_slots(self._shifts, template_ids)
        self._employees.set_individual_templates(employee.employee_id, slots)
        logger.info("Employee %s individual schedule set to %s", employee.employee_id, slots)
        return self._recalculate([employee.employee_id])
