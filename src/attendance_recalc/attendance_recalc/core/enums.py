from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Per-day attendance status stored in the calculation cache."""

    ON_TIME = "On-Time"
    LATE_IN = "Late-In"
    ABSENT = "Absent"
    PUNCH_OUT_MISSING = "Punch Out Missing"
    ON_LEAVE = "On Leave"
    DAY_OFF = "Day Off"
    WORKED_ON_DAY_OFF = "Worked on Day Off"
    HALF_DAY = "Half Day"
    NO_SCHEDULE = "No Schedule Assigned"
    PRESENT = "Present"
    OUT_OF_SCHEDULE = "Out of Schedule"


class PunchStatus(int, Enum):
    """Status codes reported by the biometric device."""

    CHECK_IN = 0
    CHECK_OUT = 1
    BREAK_OUT = 2
    BREAK_IN = 3
    OVERTIME_IN = 4
    OVERTIME_OUT = 5


class QueueStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


class ScheduleSource(str, Enum):
    """Where a resolved shift template came from."""

    OVERRIDE = "override"
    INDIVIDUAL = "individual"
    DEPARTMENT = "department"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
