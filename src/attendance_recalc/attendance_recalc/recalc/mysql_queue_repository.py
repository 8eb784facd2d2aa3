from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional, Sequence, Tuple

from ..core.enums import QueueStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import QueueItem
from .repository import RecalcQueueRepository

ENQUEUE_CHUNK_SIZE = 1000

# MySQL applies assignments left to right, so `status` must come last: the
# earlier IF()s still see the old status.
_ENQUEUE_SQL = """
    INSERT INTO attendance_recalc_queue(employee_id, work_date, status, queued_at)
    VALUES(%s,%s,'pending',%s)
    ON DUPLICATE KEY UPDATE
        queued_at=IF(status IN ('done','failed'), VALUES(queued_at), queued_at),
        started_at=IF(status IN ('done','failed'), NULL, started_at),
        finished_at=IF(status IN ('done','failed'), NULL, finished_at),
        error=IF(status IN ('done','failed'), NULL, error),
        status=IF(status IN ('done','failed'), 'pending', status)
"""

_CLAIM_SQL = """
    SELECT id, employee_id, work_date, queued_at
    FROM attendance_recalc_queue
    WHERE status='pending'
    ORDER BY queued_at ASC, id ASC
    LIMIT %s
    FOR UPDATE SKIP LOCKED
"""

_ITEM_COLUMNS = "id, employee_id, work_date, status, queued_at, started_at, finished_at, error"


def _to_item(r: dict) -> QueueItem:
    return QueueItem(
        item_id=int(r["id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=QueueStatus(r["status"]),
        queued_at=r.get("queued_at"),
        started_at=r.get("started_at"),
        finished_at=r.get("finished_at"),
        error=r.get("error"),
    )


class MySQLRecalcQueueRepository(RecalcQueueRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def enqueue_many(self, pairs: Sequence[Tuple[int, date]], *, now: datetime) -> int:
        keys = sorted({(int(e), d) for e, d in pairs})
        if not keys:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            for offset in range(0, len(keys), ENQUEUE_CHUNK_SIZE):
                chunk = keys[offset:offset + ENQUEUE_CHUNK_SIZE]
                cur.executemany(_ENQUEUE_SQL, [(e, d, now) for e, d in chunk])
        return len(keys)

    def claim(self, limit: int, *, now: datetime) -> Sequence[QueueItem]:
        if limit <= 0:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_CLAIM_SQL, (int(limit),))
            rows = fetchall(cur)
            if not rows:
                return []

            ids = [int(r["id"]) for r in rows]
            placeholders = ",".join(["%s"] * len(ids))
            cur.execute(
                f"""
                UPDATE attendance_recalc_queue
                SET status='processing', started_at=%s
                WHERE id IN ({placeholders})
                """,
                (now, *ids),
            )
            return [
                QueueItem(
                    item_id=int(r["id"]),
                    employee_id=int(r["employee_id"]),
                    work_date=r["work_date"],
                    status=QueueStatus.PROCESSING,
                    queued_at=r.get("queued_at"),
                    started_at=now,
                )
                for r in rows
            ]

    def mark(self, item_id: int, status: QueueStatus, *, now: datetime, error: Optional[str] = None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_recalc_queue
                SET status=%s, finished_at=%s, error=%s
                WHERE id=%s
                """,
                (status.value, now, error, int(item_id)),
            )

    def release(self, item_id: int, *, error: Optional[str] = None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_recalc_queue
                SET status='pending', started_at=NULL, error=%s
                WHERE id=%s AND status='processing'
                """,
                (error, int(item_id)),
            )

    def count_pending(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_recalc_queue WHERE status='pending'")
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def status_counts(self, *, since: datetime) -> Dict[QueueStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT status, COUNT(*) AS n
                FROM attendance_recalc_queue
                WHERE queued_at >= %s
                GROUP BY status
                """,
                (since,),
            )
            counts = {status: 0 for status in QueueStatus}
            for r in fetchall(cur):
                counts[QueueStatus(r["status"])] = int(r["n"])
            return counts

    def list_processing_before(self, cutoff: datetime) -> Sequence[QueueItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ITEM_COLUMNS}
                FROM attendance_recalc_queue
                WHERE status='processing' AND started_at < %s
                ORDER BY started_at ASC
                """,
                (cutoff,),
            )
            return [_to_item(r) for r in fetchall(cur)]

    def reset_processing_before(self, cutoff: datetime, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_recalc_queue
                SET status='pending', started_at=NULL, queued_at=%s
                WHERE status='processing' AND started_at < %s
                """,
                (now, cutoff),
            )
            return int(cur.rowcount)
