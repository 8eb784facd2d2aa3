from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, PunchStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import LeaveRecord, PunchLog, ScheduleException
from .repository import AttendanceSourceRepository


def _punch_status(value) -> PunchStatus:
    try:
        return PunchStatus(int(value))
    except (TypeError, ValueError):
        return PunchStatus.CHECK_IN


class MySQLAttendanceRepository(AttendanceSourceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_punches(self, employee_id: int, start: datetime, end: datetime) -> Sequence[PunchLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employee_id, punch_time, status, verify_mode
                FROM attendance_logs
                WHERE employee_id=%s AND punch_time >= %s AND punch_time < %s
                ORDER BY punch_time ASC, id ASC
                """,
                (int(employee_id), start, end),
            )
            rows = fetchall(cur)
            return [
                PunchLog(
                    log_id=int(r["id"]),
                    employee_id=int(r["employee_id"]),
                    punch_time=r["punch_time"],
                    status_code=_punch_status(r.get("status")),
                    verify_mode=int(r.get("verify_mode") or 0),
                )
                for r in rows
            ]

    def get_approved_leave(self, employee_id: int, work_date: date) -> Optional[LeaveRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, start_date, end_date, status
                FROM leave_requests
                WHERE employee_id=%s AND status=%s AND start_date <= %s AND end_date >= %s
                ORDER BY start_date ASC
                LIMIT 1
                """,
                (int(employee_id), LeaveStatus.APPROVED.value, work_date, work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return LeaveRecord(
                employee_id=int(r["employee_id"]),
                start_date=r["start_date"],
                end_date=r["end_date"],
                status=LeaveStatus(r["status"]),
            )

    def get_exception(self, employee_id: int, work_date: date) -> Optional[ScheduleException]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, work_date, start_time, end_time, is_day_off, is_half_day
                FROM schedule_exceptions
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ScheduleException(
                employee_id=int(r["employee_id"]),
                work_date=r["work_date"],
                start_time=normalize_mysql_time(r.get("start_time")),
                end_time=normalize_mysql_time(r.get("end_time")),
                is_day_off=bool(r.get("is_day_off")),
                is_half_day=bool(r.get("is_half_day")),
            )
