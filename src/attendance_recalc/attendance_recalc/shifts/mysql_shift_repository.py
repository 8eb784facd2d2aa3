from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ShiftTemplate
from .repository import ShiftRepository


def _to_template(r: dict) -> ShiftTemplate:
    buffer_minutes = r.get("buffer_time_minutes")
    return ShiftTemplate(
        template_id=int(r["id"]),
        name=r["name"],
        tz_string=r["tz_string"],
        buffer_minutes=int(buffer_minutes) if buffer_minutes is not None else None,
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ShiftTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, tz_string, buffer_time_minutes
                FROM shift_templates
                ORDER BY id
                """
            )
            return [_to_template(r) for r in fetchall(cur)]

    def get_by_id(self, template_id: int) -> Optional[ShiftTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, tz_string, buffer_time_minutes
                FROM shift_templates
                WHERE id=%s
                """,
                (int(template_id),),
            )
            r = fetchone(cur)
            return _to_template(r) if r else None

    def upsert(self, template: ShiftTemplate) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_templates(id, name, tz_string, buffer_time_minutes)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name),
                    tz_string=VALUES(tz_string),
                    buffer_time_minutes=VALUES(buffer_time_minutes)
                """,
                (template.template_id, template.name, template.tz_string, template.buffer_minutes),
            )
