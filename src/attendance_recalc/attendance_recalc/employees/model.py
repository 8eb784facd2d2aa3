from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee master data used by schedule resolution.

    `individual_template_ids` holds the standing (slot 1..3) shift template
    assignment; a None slot falls through to the department schedule.
    """

    employee_id: int
    full_name: str
    department_id: Optional[int]
    individual_template_ids: Tuple[Optional[int], Optional[int], Optional[int]] = (None, None, None)
    is_active: bool = True

    @property
    def primary_template_id(self) -> Optional[int]:
        return self.individual_template_ids[0]
