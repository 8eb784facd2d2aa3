from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee master data.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_many(self, employee_ids: Sequence[int]) -> Sequence[Employee]:
        raise NotImplementedError

    def list_active_ids(self) -> Sequence[int]:
        raise NotImplementedError

    def list_ids_for_department(self, department_id: int) -> Sequence[int]:
        raise NotImplementedError

    def list_ids_using_template(self, template_id: int) -> Sequence[int]:
        """Employees whose schedule can resolve to the template (any slot or source)."""

        raise NotImplementedError

    def set_individual_templates(self, employee_id: int, template_ids: Sequence[Optional[int]]) -> bool:
        raise NotImplementedError
