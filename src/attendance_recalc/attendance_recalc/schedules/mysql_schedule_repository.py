from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DepartmentSchedule, NewOverride, ScheduleOverride
from .repository import ScheduleRepository

_OVERRIDE_COLUMNS = """
    id, employee_id, override_tz_id, original_tz_id, active_from, active_until,
    label, is_active, created_at, ended_at, ended_by
"""


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _to_override(r: dict) -> ScheduleOverride:
    return ScheduleOverride(
        override_id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        override_template_id=int(r["override_tz_id"]),
        original_template_id=_opt_int(r.get("original_tz_id")),
        active_from=r["active_from"],
        active_until=r["active_until"],
        label=r.get("label") or "",
        is_active=bool(r.get("is_active")),
        created_at=r.get("created_at"),
        ended_at=r.get("ended_at"),
        ended_by=r.get("ended_by"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_department_schedule(self, department_id: int) -> Optional[DepartmentSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT department_id, tz_id_1, tz_id_2, tz_id_3
                FROM department_schedules
                WHERE department_id=%s
                """,
                (int(department_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return DepartmentSchedule(
                department_id=int(r["department_id"]),
                template_ids=(_opt_int(r.get("tz_id_1")), _opt_int(r.get("tz_id_2")), _opt_int(r.get("tz_id_3"))),
            )

    def set_department_schedule(self, schedule: DepartmentSchedule) -> None:
        slot1, slot2, slot3 = schedule.template_ids
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO department_schedules(department_id, tz_id_1, tz_id_2, tz_id_3)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE tz_id_1=VALUES(tz_id_1), tz_id_2=VALUES(tz_id_2), tz_id_3=VALUES(tz_id_3)
                """,
                (int(schedule.department_id), slot1, slot2, slot3),
            )

    def get_active_override(self, employee_id: int) -> Optional[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_OVERRIDE_COLUMNS}
                FROM schedule_overrides
                WHERE employee_id=%s AND is_active=1
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _to_override(r) if r else None

    def list_active_overrides(self, employee_ids: Optional[Sequence[int]] = None) -> Sequence[ScheduleOverride]:
        clauses = ["is_active=1"]
        params: list[object] = []
        if employee_ids:
            clauses.append(f"employee_id IN ({','.join(['%s'] * len(employee_ids))})")
            params.extend(int(i) for i in employee_ids)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_OVERRIDE_COLUMNS}
                FROM schedule_overrides
                WHERE {where}
                ORDER BY created_at DESC
                """,
                tuple(params),
            )
            return [_to_override(r) for r in fetchall(cur)]

    def replace_active_override(self, new: NewOverride, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedule_overrides
                SET is_active=0, ended_at=%s, ended_by='replaced'
                WHERE employee_id=%s AND is_active=1
                """,
                (now, new.employee_id),
            )
            cur.execute(
                """
                INSERT INTO schedule_overrides(
                    employee_id, override_tz_id, original_tz_id, active_from, active_until, label, is_active, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (
                    new.employee_id,
                    new.override_template_id,
                    new.original_template_id,
                    new.active_from,
                    new.active_until,
                    new.label,
                    now,
                ),
            )
            override_id = int(cur.lastrowid)
            cur.execute(
                "UPDATE employees SET individual_tz_1=%s WHERE id=%s",
                (new.override_template_id, new.employee_id),
            )
            return override_id

    def end_override(self, override: ScheduleOverride, *, now: datetime, ended_by: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedule_overrides
                SET is_active=0, ended_at=%s, ended_by=%s
                WHERE id=%s AND is_active=1
                """,
                (now, ended_by, override.override_id),
            )
            cur.execute(
                "UPDATE employees SET individual_tz_1=%s WHERE id=%s",
                (override.original_template_id, override.employee_id),
            )
