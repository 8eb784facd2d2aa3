from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Sequence, Tuple

import pytest

from src.attendance_recalc.attendance_recalc.attendance.model import PunchLog
from src.attendance_recalc.attendance_recalc.core.enums import QueueStatus
from src.attendance_recalc.attendance_recalc.core.exceptions import ValidationError
from src.attendance_recalc.attendance_recalc.recalc.model import QueueItem, QueueProgress
from src.attendance_recalc.attendance_recalc.recalc.service import RecalcQueueService

NOW = datetime(2024, 6, 10, 8, 0)


class InMemoryQueue:
    """Lock-guarded stand-in for the SKIP LOCKED claim."""

    def __init__(self):
        self._lock = threading.Lock()
        self.items: Dict[Tuple[int, date], QueueItem] = {}

    def enqueue_many(self, pairs: Sequence[Tuple[int, date]], *, now: datetime) -> int:
        with self._lock:
            for employee_id, work_date in pairs:
                key = (employee_id, work_date)
                current = self.items.get(key)
                if current is None:
                    self.items[key] = QueueItem(len(self.items) + 1, employee_id, work_date, QueueStatus.PENDING, now)
                elif current.status in (QueueStatus.DONE, QueueStatus.FAILED):
                    self.items[key] = QueueItem(current.item_id, employee_id, work_date, QueueStatus.PENDING, now)
            return len(pairs)

    def claim(self, limit: int, *, now: datetime) -> Sequence[QueueItem]:
        with self._lock:
            pending = sorted(
                (i for i in self.items.values() if i.status == QueueStatus.PENDING),
                key=lambda i: (i.queued_at, i.item_id),
            )[:limit]
            claimed = [replace(i, status=QueueStatus.PROCESSING, started_at=now) for i in pending]
            for item in claimed:
                self.items[(item.employee_id, item.work_date)] = item
            return claimed

    def mark(self, item_id: int, status: QueueStatus, *, now: datetime, error: Optional[str] = None) -> None:
        with self._lock:
            for key, item in self.items.items():
                if item.item_id == item_id:
                    self.items[key] = replace(item, status=status, finished_at=now, error=error)

    def count_pending(self) -> int:
        return sum(1 for i in self.items.values() if i.status == QueueStatus.PENDING)

    def status_counts(self, *, since: datetime) -> Dict[QueueStatus, int]:
        counts = {s: 0 for s in QueueStatus}
        for item in self.items.values():
            if item.queued_at >= since:
                counts[item.status] += 1
        return counts

    def list_processing_before(self, cutoff: datetime) -> Sequence[QueueItem]:
        return [i for i in self.items.values() if i.status == QueueStatus.PROCESSING and i.started_at < cutoff]

    def reset_processing_before(self, cutoff: datetime, *, now: datetime) -> int:
        stuck = self.list_processing_before(cutoff)
        for item in stuck:
            self.items[(item.employee_id, item.work_date)] = replace(
                item, status=QueueStatus.PENDING, started_at=None, queued_at=now
            )
        return len(stuck)


class Clock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class ProvisionalRows:
    def __init__(self, *keys):
        self.keys = list(keys)
        self.asked_at = None

    def list_provisional(self, *, now):
        self.asked_at = now
        return list(self.keys)


def _service(clock: Clock | None = None, calculations=None):
    repo = InMemoryQueue()
    return RecalcQueueService(repo, calculations=calculations, clock=clock or Clock()), repo


def test_enqueue_is_idempotent_while_pending():
    svc, repo = _service()
    svc.enqueue(1, date(2024, 6, 1))
    svc.enqueue(1, date(2024, 6, 1))
    svc.enqueue_range(1, date(2024, 6, 1), date(2024, 6, 3))

    assert len(repo.items) == 3
    assert svc.count_pending() == 3


def test_done_items_become_pending_again_but_processing_is_untouched():
    svc, repo = _service()
    svc.enqueue_range(1, date(2024, 6, 1), date(2024, 6, 2))
    first, second = svc.claim_batch(2)
    svc.complete(first, QueueStatus.DONE)

    svc.enqueue_range(1, date(2024, 6, 1), date(2024, 6, 2))

    assert repo.items[(1, first.work_date)].status == QueueStatus.PENDING
    assert repo.items[(1, second.work_date)].status == QueueStatus.PROCESSING
    assert repo.items[(1, first.work_date)].item_id == first.item_id


def test_concurrent_claims_never_share_an_item():
    svc, _ = _service()
    svc.enqueue_employees(range(1, 21), date(2024, 6, 1), date(2024, 6, 10))
    claimed: list = []
    guard = threading.Lock()

    def worker():
        while True:
            batch = svc.claim_batch(7)
            if not batch:
                return
            with guard:
                claimed.extend((i.employee_id, i.work_date) for i in batch)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(claimed) == 200
    assert len(set(claimed)) == 200


def test_claim_batch_zero_and_complete_rejects_non_terminal():
    svc, _ = _service()
    svc.enqueue(1, date(2024, 6, 1))
    assert svc.claim_batch(0) == []

    [item] = svc.claim_batch(5)
    with pytest.raises(ValidationError):
        svc.complete(item, QueueStatus.PENDING)


def test_enqueue_punches_covers_punch_date_and_previous_day():
    svc, repo = _service()
    svc.enqueue_punches(
        [
            PunchLog(1, 7, datetime(2024, 6, 5, 2, 10)),
            PunchLog(2, 7, datetime(2024, 6, 5, 9, 0)),
            PunchLog(3, 7, None),
        ]
    )
    assert sorted(repo.items) == [(7, date(2024, 6, 4)), (7, date(2024, 6, 5))]


def test_enqueue_recent_includes_today():
    svc, repo = _service()
    svc.enqueue_recent([3], days=3)
    assert sorted(d for _, d in repo.items) == [date(2024, 6, 8), date(2024, 6, 9), date(2024, 6, 10)]


def test_progress_counts_window_and_message():
    clock = Clock(NOW - timedelta(hours=2))
    svc, _ = _service(clock)
    svc.enqueue(1, date(2024, 5, 1))
    [old] = svc.claim_batch(1)
    svc.complete(old, QueueStatus.DONE)

    clock.now = NOW
    svc.enqueue_range(2, date(2024, 6, 1), date(2024, 6, 3))
    [item] = svc.claim_batch(1)
    svc.complete(item, QueueStatus.DONE)

    progress = svc.progress()
    assert (progress.total, progress.done, progress.pending) == (3, 1, 2)
    assert progress.percent == 33
    assert progress.is_active is True
    assert progress.message == "Updating attendance data... 1 of 3 complete"

    assert svc.progress(window_minutes=180).total == 4


def test_progress_percent_rounding_and_idle_states():
    assert QueueProgress(pending=1, processing=0, done=1, failed=0).percent == 50
    assert QueueProgress(pending=1, processing=0, done=2, failed=0).percent == 67
    idle = QueueProgress(pending=0, processing=0, done=0, failed=0)
    assert (idle.percent, idle.is_active, idle.message) == (100, False, None)
    finished = QueueProgress(pending=0, processing=0, done=4, failed=1)
    assert finished.message == "Attendance data up to date (4 records synced)"
    assert finished.to_dict()["isActive"] is False


def test_reset_stuck_returns_old_processing_items_to_pending():
    clock = Clock(NOW - timedelta(minutes=30))
    svc, repo = _service(clock)
    svc.enqueue_range(1, date(2024, 6, 1), date(2024, 6, 2))
    svc.claim_batch(1)

    clock.now = NOW
    svc.claim_batch(1)

    assert len(svc.stuck_items(15)) == 1
    assert svc.reset_stuck(15) == 1
    assert svc.count_pending() == 1
    assert svc.stuck_items(15) == []


def test_punch_shortly_before_midnight_also_queues_next_date():
    svc, repo = _service()
    svc.enqueue_punches([PunchLog(1, 7, datetime(2024, 6, 5, 23, 0)), PunchLog(2, 8, datetime(2024, 6, 5, 21, 59))])

    assert sorted(d for e, d in repo.items if e == 7) == [date(2024, 6, 4), date(2024, 6, 5), date(2024, 6, 6)]
    assert sorted(d for e, d in repo.items if e == 8) == [date(2024, 6, 4), date(2024, 6, 5)]


def test_finished_shift_sweep_requeues_rows_cached_mid_shift():
    rows = ProvisionalRows((1, date(2024, 6, 9)), (2, date(2024, 6, 9)))
    svc, repo = _service(calculations=rows)

    assert svc.enqueue_finished_shifts() == 2
    assert rows.asked_at == NOW
    assert svc.count_pending() == 2

    # Already pending: the sweep leaves them as they are.
    [item] = svc.claim_batch(1)
    svc.enqueue_finished_shifts()
    assert repo.items[(item.employee_id, item.work_date)].status == QueueStatus.PROCESSING


def test_finished_shift_sweep_without_cache_is_a_no_op():
    svc, _ = _service()
    assert svc.enqueue_finished_shifts() == 0
