from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..attendance.attribution import WorkingDayRule
from ..core.constants import DEFAULT_BUFFER_MINUTES, DEFAULT_WORKING_DAY_START

BUFFER_TIME_KEY = "buffer_time_minutes"
WORKING_DAY_START_KEY = "working_day_start"
WORKING_DAY_ENABLED_KEY = "working_day_enabled"


@dataclass(frozen=True)
class CompanySettings:
    buffer_time_minutes: int = DEFAULT_BUFFER_MINUTES
    working_day_start: time = DEFAULT_WORKING_DAY_START
    working_day_enabled: bool = False

    @property
    def working_day_rule(self) -> WorkingDayRule:
        return WorkingDayRule(start_time=self.working_day_start, enabled=self.working_day_enabled)

    def to_dict(self) -> dict:
        return {
            BUFFER_TIME_KEY: self.buffer_time_minutes,
            WORKING_DAY_START_KEY: self.working_day_start.strftime("%H:%M"),
            WORKING_DAY_ENABLED_KEY: self.working_day_enabled,
        }
