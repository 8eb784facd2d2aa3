from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Sequence

from ..attendance.model import DailyCalculation


@dataclass(frozen=True)
class RangeRead:
    """Cached rows of a range read plus the dates that have no row yet."""

    rows: Sequence[DailyCalculation]
    missing: Dict[int, List[date]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [row.to_dict() for row in self.rows],
            "missing": {
                str(employee_id): [d.isoformat() for d in dates] for employee_id, dates in self.missing.items() if dates
            },
        }
