from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import QueueStatus


@dataclass(frozen=True)
class QueueItem:
    item_id: int
    employee_id: int
    work_date: date
    status: QueueStatus
    queued_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class QueueProgress:
    pending: int
    processing: int
    done: int
    failed: int

    @property
    def total(self) -> int:
        return self.pending + self.processing + self.done + self.failed

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 100
        return math.floor((self.done + self.failed) * 100 / self.total + 0.5)

    @property
    def is_active(self) -> bool:
        return self.pending + self.processing > 0

    @property
    def message(self) -> Optional[str]:
        if self.is_active:
            return f"Updating attendance data... {self.done} of {self.total} complete"
        if self.total > 0:
            return f"Attendance data up to date ({self.done} records synced)"
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pending": self.pending,
            "processing": self.processing,
            "done": self.done,
            "failed": self.failed,
            "total": self.total,
            "percent": self.percent,
            "isActive": self.is_active,
            "message": self.message,
        }


@dataclass(frozen=True)
class DrainResult:
    fired: int
    pending: int

    @property
    def message(self) -> str:
        if self.pending == 0:
            return "Queue is empty"
        return f"Fired {self.fired} worker(s) for {self.pending} pending item(s)"

    def to_dict(self) -> Dict[str, Any]:
        return {"fired": self.fired, "pending": self.pending, "message": self.message}


@dataclass(frozen=True)
class WorkerReport:
    claimed: int = 0
    done: int = 0
    failed: int = 0
    abandoned: int = 0
    retried: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "claimed": self.claimed,
            "done": self.done,
            "failed": self.failed,
            "abandoned": self.abandoned,
            "retried": self.retried,
        }
