from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional

from src.attendance_recalc.attendance_recalc.attendance.attribution import (
    ClaimWindow,
    WorkingDayRule,
    claim_window,
    natural_window,
    select_punches,
    shift_window,
)
from src.attendance_recalc.attendance_recalc.attendance.model import LeaveRecord, PunchLog, ScheduleException
from src.attendance_recalc.attendance_recalc.attendance.service import AttendanceCalculator
from src.attendance_recalc.attendance_recalc.core.enums import AttendanceStatus, ScheduleSource
from src.attendance_recalc.attendance_recalc.employees.model import Employee
from src.attendance_recalc.attendance_recalc.schedules.resolver import NO_SCHEDULE, ResolvedShift, ScheduleResolver
from src.attendance_recalc.attendance_recalc.settings.service import SettingsService
from src.attendance_recalc.attendance_recalc.shifts.codec import WorkWindow, decode_for_date
from src.attendance_recalc.attendance_recalc.shifts.model import ShiftTemplate

MONDAY = date(2024, 3, 4)
TUESDAY = date(2024, 3, 5)
DAY = WorkWindow(start=time(9, 0), end=time(17, 0), crosses_midnight=False)
NIGHT = WorkWindow(start=time(21, 0), end=time(4, 0), crosses_midnight=True)
OFF = WorkingDayRule(start_time=time(10, 0), enabled=False)
ON = WorkingDayRule(start_time=time(10, 0), enabled=True)


def at(d: date, hh: int, mm: int = 0) -> datetime:
    return datetime.combine(d, time(hh, mm))


def test_day_shift_claims_until_midnight_or_boundary():
    assert natural_window(MONDAY, DAY, OFF) == ClaimWindow(at(MONDAY, 7), at(TUESDAY, 0))
    # Capped so the next morning's early arrival (07:00) stays with the next date.
    assert natural_window(MONDAY, DAY, ON) == ClaimWindow(at(MONDAY, 7), at(TUESDAY, 7))


def test_night_shift_claims_until_next_boundary():
    assert natural_window(MONDAY, NIGHT, OFF) == ClaimWindow(at(MONDAY, 19), at(TUESDAY, 10))
    assert natural_window(MONDAY, NIGHT, ON) == ClaimWindow(at(MONDAY, 19), at(TUESDAY, 10))


def test_unscheduled_day_claims_calendar_or_working_day():
    assert natural_window(MONDAY, None, OFF) == ClaimWindow(at(MONDAY, 0), at(TUESDAY, 0))
    assert natural_window(MONDAY, None, ON) == ClaimWindow(at(MONDAY, 10), at(TUESDAY, 10))


def test_neighbour_trimming_keeps_scheduled_end():
    early_next = at(TUESDAY, 2)
    window = claim_window(MONDAY, NIGHT, OFF, not_before=at(MONDAY, 20), not_after=early_next)

    assert window.start == at(MONDAY, 20)
    assert window.end == at(TUESDAY, 4)


def test_select_punches_sorts_and_filters():
    window = ClaimWindow(at(MONDAY, 7), at(TUESDAY, 0))
    logs = [
        PunchLog(1, 1, at(MONDAY, 17)),
        PunchLog(2, 1, at(MONDAY, 6, 59)),
        PunchLog(3, 1, at(MONDAY, 9)),
        PunchLog(4, 1, at(TUESDAY, 0)),
        PunchLog(5, 1, None),
    ]
    assert select_punches(logs, window) == [at(MONDAY, 9), at(MONDAY, 17)]


def test_shift_window_applies_exceptions():
    shift = ResolvedShift(MONDAY, ShiftTemplate(1, "Day", "09001700" * 7), ScheduleSource.DEPARTMENT, DAY)

    assert shift_window(shift, None) == DAY
    assert shift_window(shift, ScheduleException(1, MONDAY, is_day_off=True)) is None
    assert shift_window(shift, ScheduleException(1, MONDAY, is_half_day=True)) == DAY
    assert shift_window(NO_SCHEDULE, None) is None

    custom = shift_window(shift, ScheduleException(1, MONDAY, start_time=time(22, 0), end_time=time(6, 0)))
    assert custom == WorkWindow(start=time(22, 0), end=time(6, 0), crosses_midnight=True)


# --- Calculator: punches are never counted on two consecutive days ---


@dataclass
class InMemoryEmployees:
    employees: dict[int, Employee]

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(employee_id)


class NoOverrides:
    def get_active_override(self, employee_id: int):
        return None

    def get_department_schedule(self, department_id: int):
        return None


@dataclass
class InMemoryShifts:
    templates: dict[int, ShiftTemplate]

    def get_by_id(self, template_id: int) -> Optional[ShiftTemplate]:
        return self.templates.get(template_id)


@dataclass
class InMemorySources:
    logs: list[PunchLog]
    exceptions: dict[date, ScheduleException] = field(default_factory=dict)
    leave: Optional[LeaveRecord] = None

    def get_punches(self, employee_id: int, start: datetime, end: datetime):
        return sorted(
            (p for p in self.logs if p.employee_id == employee_id and start <= p.punch_time < end),
            key=lambda p: p.punch_time,
        )

    def get_approved_leave(self, employee_id: int, work_date: date):
        return self.leave

    def get_exception(self, employee_id: int, work_date: date):
        return self.exceptions.get(work_date)


@dataclass
class InMemorySettings:
    values: dict[str, str] = field(default_factory=dict)

    def get_all(self) -> dict[str, str]:
        return dict(self.values)


def _calculator(template: ShiftTemplate, logs: list[PunchLog], settings: Optional[dict] = None, **sources):
    resolver = ScheduleResolver(
        employees=InMemoryEmployees({1: Employee(1, "Night owl", None, (template.template_id, None, None))}),
        schedules=NoOverrides(),
        shifts=InMemoryShifts({template.template_id: template}),
    )
    return AttendanceCalculator(
        resolver=resolver,
        sources=InMemorySources(logs, **sources),
        settings=SettingsService(InMemorySettings(settings or {})),
        clock=lambda: datetime(2030, 1, 1),
    )


def test_night_week_assigns_every_punch_to_exactly_one_day():
    night = ShiftTemplate(7, "Night", "21000400" * 7, buffer_minutes=15)
    days = [MONDAY + timedelta(days=i) for i in range(5)]
    logs = []
    for i, d in enumerate(days):
        logs.append(PunchLog(2 * i + 1, 1, at(d, 20, 50)))
        logs.append(PunchLog(2 * i + 2, 1, at(d + timedelta(days=1), 4, 10)))

    calculator = _calculator(night, logs)
    results = [calculator.calculate(1, d) for d in days]

    claimed = []
    for calc in results:
        assert calc.status == AttendanceStatus.ON_TIME
        claimed.extend([calc.in_time, calc.out_time])
    assert len(claimed) == len(set(claimed)) == len(logs)


def test_night_shift_followed_by_day_shift_does_not_share_punches():
    # Night Sunday..Monday, day shift from Tuesday on.
    rotation = ShiftTemplate(8, "Rotation", "21000400" * 2 + "09001700" * 5, buffer_minutes=15)
    logs = [
        PunchLog(1, 1, at(MONDAY, 20, 55)),
        PunchLog(2, 1, at(TUESDAY, 4, 0)),
        PunchLog(3, 1, at(TUESDAY, 8, 55)),
        PunchLog(4, 1, at(TUESDAY, 17, 5)),
    ]
    calculator = _calculator(rotation, logs, settings={"working_day_enabled": "true"})

    monday = calculator.calculate(1, MONDAY)
    tuesday = calculator.calculate(1, TUESDAY)

    assert (monday.in_time, monday.out_time) == (at(MONDAY, 20, 55), at(TUESDAY, 4, 0))
    assert (tuesday.in_time, tuesday.out_time) == (at(TUESDAY, 8, 55), at(TUESDAY, 17, 5))
    assert monday.status == tuesday.status == AttendanceStatus.ON_TIME


def test_calculator_uses_exception_for_the_day():
    day = ShiftTemplate(9, "Day", "09001700" * 7)
    calculator = _calculator(day, [], exceptions={MONDAY: ScheduleException(1, MONDAY, is_day_off=True)})

    assert calculator.calculate(1, MONDAY).status == AttendanceStatus.DAY_OFF
    assert calculator.calculate(1, TUESDAY).status == AttendanceStatus.ABSENT


def test_day_calculated_mid_shift_becomes_punch_out_missing_once_shift_ends():
    day = ShiftTemplate(3, "Office", "09001700" * 7)
    calculator = _calculator(day, [PunchLog(1, 1, at(MONDAY, 9, 5))])
    synced_at = at(MONDAY, 9, 6)
    two_days_later = synced_at + timedelta(days=2)

    early = calculator.calculate(1, MONDAY, now=synced_at)

    assert (early.status, early.out_time, early.total_hours) == (AttendanceStatus.ON_TIME, None, 0.0)
    assert early.calculated_at == synced_at
    assert not early.is_provisional(at(MONDAY, 16, 59))
    assert early.is_provisional(two_days_later)

    final = calculator.calculate(1, MONDAY, now=two_days_later)

    assert final.status == AttendanceStatus.PUNCH_OUT_MISSING
    assert not final.is_provisional(two_days_later)
