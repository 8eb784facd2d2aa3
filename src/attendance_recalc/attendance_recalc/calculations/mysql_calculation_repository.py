from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Sequence, Tuple

from ..attendance.model import DailyCalculation
from ..common.datetime_utils import now_local
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import CalculationRepository

_UPSERT_SQL = """
    INSERT INTO daily_attendance_calculations(
        employee_id, work_date, status, in_time, out_time,
        total_hours, regular_hours, overtime_hours,
        shift_name, shift_start, shift_end, calculated_at
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
    ON DUPLICATE KEY UPDATE
        status=VALUES(status),
        in_time=VALUES(in_time),
        out_time=VALUES(out_time),
        total_hours=VALUES(total_hours),
        regular_hours=VALUES(regular_hours),
        overtime_hours=VALUES(overtime_hours),
        shift_name=VALUES(shift_name),
        shift_start=VALUES(shift_start),
        shift_end=VALUES(shift_end),
        calculated_at=VALUES(calculated_at)
"""


def _params(c: DailyCalculation) -> tuple:
    return (
        c.employee_id,
        c.work_date,
        c.status.value,
        c.in_time,
        c.out_time,
        c.total_hours,
        c.regular_hours,
        c.overtime_hours,
        c.shift_name,
        c.shift_start,
        c.shift_end,
        c.calculated_at,
    )


class MySQLCalculationRepository(CalculationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_range(self, employee_ids: Sequence[int], start: date, end: date) -> Sequence[DailyCalculation]:
        if not employee_ids:
            return []
        placeholders = ",".join(["%s"] * len(employee_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT employee_id, work_date, status, in_time, out_time,
                       total_hours, regular_hours, overtime_hours,
                       shift_name, shift_start, shift_end, calculated_at
                FROM daily_attendance_calculations
                WHERE employee_id IN ({placeholders}) AND work_date BETWEEN %s AND %s
                ORDER BY employee_id ASC, work_date ASC
                """,
                (*[int(i) for i in employee_ids], start, end),
            )
            rows = fetchall(cur)
            return [
                DailyCalculation(
                    employee_id=int(r["employee_id"]),
                    work_date=r["work_date"],
                    status=AttendanceStatus(r["status"]),
                    in_time=r.get("in_time"),
                    out_time=r.get("out_time"),
                    total_hours=float(r.get("total_hours") or 0),
                    regular_hours=float(r.get("regular_hours") or 0),
                    overtime_hours=float(r.get("overtime_hours") or 0),
                    shift_name=r.get("shift_name"),
                    shift_start=r.get("shift_start"),
                    shift_end=r.get("shift_end"),
                    calculated_at=r.get("calculated_at"),
                )
                for r in rows
            ]

    def put(self, calculation: DailyCalculation) -> DailyCalculation:
        return self.put_many([calculation])[0]

    def put_many(self, calculations: Sequence[DailyCalculation]) -> Sequence[DailyCalculation]:
        if not calculations:
            return []
        stamped = [replace(c, calculated_at=c.calculated_at or now_local()) for c in calculations]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(_UPSERT_SQL, [_params(c) for c in stamped])
        return stamped

    def list_provisional(self, *, now: datetime) -> Sequence[Tuple[int, date]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, work_date
                FROM daily_attendance_calculations
                WHERE shift_end IS NOT NULL AND shift_end <= %s AND calculated_at < shift_end
                ORDER BY work_date ASC, employee_id ASC
                """,
                (now,),
            )
            return [(int(r["employee_id"]), r["work_date"]) for r in fetchall(cur)]
