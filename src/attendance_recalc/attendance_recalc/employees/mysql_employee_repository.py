from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_SELECT = """
    SELECT id, full_name, department_id, individual_tz_1, individual_tz_2, individual_tz_3, is_active
    FROM employees
"""


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["id"]),
        full_name=row["full_name"],
        department_id=_opt_int(row.get("department_id")),
        individual_template_ids=(
            _opt_int(row.get("individual_tz_1")),
            _opt_int(row.get("individual_tz_2")),
            _opt_int(row.get("individual_tz_3")),
        ),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_many(self, employee_ids: Sequence[int]) -> Sequence[Employee]:
        ids = [int(i) for i in employee_ids]
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE id IN ({placeholders}) ORDER BY id", tuple(ids))
            return [_to_employee(r) for r in fetchall(cur)]

    def list_active_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM employees WHERE is_active=1 ORDER BY id")
            return [int(r["id"]) for r in fetchall(cur)]

    def list_ids_for_department(self, department_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM employees WHERE department_id=%s AND is_active=1 ORDER BY id",
                (int(department_id),),
            )
            return [int(r["id"]) for r in fetchall(cur)]

    def list_ids_using_template(self, template_id: int) -> Sequence[int]:
        """Employees any of whose dates can resolve to the template.

        An active override stays active after `active_until`; dates outside it
        resolve with slot 1 read as `original_tz_id`, falling through to
        slots 2..3 and then the department schedule when that is NULL.
        """
        tid = int(template_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT e.id
                FROM employees e
                LEFT JOIN department_schedules ds ON ds.department_id = e.department_id
                LEFT JOIN schedule_overrides so ON so.employee_id = e.id AND so.is_active=1
                WHERE e.is_active=1 AND (
                    %s IN (e.individual_tz_1, e.individual_tz_2, e.individual_tz_3)
                    OR (
                        e.individual_tz_1 IS NULL AND e.individual_tz_2 IS NULL AND e.individual_tz_3 IS NULL
                        AND %s IN (ds.tz_id_1, ds.tz_id_2, ds.tz_id_3)
                    )
                    OR so.override_tz_id=%s
                    OR so.original_tz_id=%s
                    OR (
                        so.id IS NOT NULL AND so.original_tz_id IS NULL
                        AND e.individual_tz_2 IS NULL AND e.individual_tz_3 IS NULL
                        AND %s IN (ds.tz_id_1, ds.tz_id_2, ds.tz_id_3)
                    )
                )
                ORDER BY e.id
                """,
                (tid, tid, tid, tid, tid),
            )
            return [int(r["id"]) for r in fetchall(cur)]

    def set_individual_templates(self, employee_id: int, template_ids: Sequence[Optional[int]]) -> bool:
        slots = list(template_ids) + [None] * (3 - len(template_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET individual_tz_1=%s, individual_tz_2=%s, individual_tz_3=%s
                WHERE id=%s
                """,
                (slots[0], slots[1], slots[2], int(employee_id)),
            )
            return cur.rowcount > 0
