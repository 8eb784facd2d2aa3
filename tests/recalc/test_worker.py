from __future__ import annotations

from datetime import date

from mysql.connector import errors as db_errors

from src.attendance_recalc.attendance_recalc.core.enums import QueueStatus
from src.attendance_recalc.attendance_recalc.core.exceptions import DataIntegrityError
from src.attendance_recalc.attendance_recalc.recalc.model import QueueItem
from src.attendance_recalc.attendance_recalc.recalc.worker import RecalcWorker


def _item(item_id: int, employee_id: int = 1) -> QueueItem:
    return QueueItem(item_id, employee_id, date(2024, 6, item_id), QueueStatus.PROCESSING)


class FakeQueue:
    def __init__(self, *batches):
        self._batches = list(batches)
        self.completed = []
        self.released = []

    def claim_batch(self, n):
        return self._batches.pop(0)[:n] if self._batches else []

    def complete(self, item, outcome, error=None):
        self.completed.append((item.item_id, outcome, error))

    def release(self, item, error=None):
        self.released.append((item.item_id, error))


class FakeCalculations:
    def __init__(self, errors=None):
        self.recomputed = []
        self._errors = errors or {}

    def recompute(self, employee_id, work_date):
        error = self._errors.get(work_date.day)
        if error:
            raise error
        self.recomputed.append((employee_id, work_date))


class Ticker:
    def __init__(self, step: float):
        self.value = 0.0
        self._step = step

    def __call__(self) -> float:
        current = self.value
        self.value += self._step
        return current


def test_each_item_is_marked_done_or_failed():
    queue = FakeQueue([_item(1), _item(2), _item(3)])
    calculations = FakeCalculations({2: DataIntegrityError("template 7 missing"), 3: KeyError("boom")})

    report = RecalcWorker(queue, calculations, batch_size=10).run_once()

    assert (report.claimed, report.done, report.failed, report.abandoned) == (3, 1, 2, 0)
    assert queue.completed[0] == (1, QueueStatus.DONE, None)
    assert queue.completed[1] == (2, QueueStatus.FAILED, "template 7 missing")
    assert queue.completed[2][1] == QueueStatus.FAILED
    assert queue.completed[2][2].startswith("KeyError")


def test_deadline_leaves_remaining_items_unmarked():
    queue = FakeQueue([_item(1), _item(2), _item(3), _item(4)])
    # deadline = 0 + 25; checks happen at 10, 20, 30
    report = RecalcWorker(queue, FakeCalculations(), timeout_seconds=25, monotonic=Ticker(10)).run_once()

    assert (report.done, report.abandoned) == (2, 2)
    assert [c[0] for c in queue.completed] == [1, 2]


def test_empty_claim_returns_empty_report():
    assert RecalcWorker(FakeQueue(), FakeCalculations()).run_once().claimed == 0


def test_run_until_empty_sums_batches():
    queue = FakeQueue([_item(1), _item(2)], [_item(3)])
    report = RecalcWorker(queue, FakeCalculations(), batch_size=2).run_until_empty()

    assert (report.claimed, report.done) == (3, 3)


def test_lost_connection_returns_item_to_pending():
    queue = FakeQueue([_item(1), _item(2)])
    calculations = FakeCalculations({1: db_errors.OperationalError("Lost connection to MySQL server")})

    report = RecalcWorker(queue, calculations).run_once()

    assert (report.done, report.failed, report.retried) == (1, 0, 1)
    assert queue.released[0][0] == 1
    assert queue.released[0][1].startswith("OperationalError")
    assert queue.completed == [(2, QueueStatus.DONE, None)]


def test_run_until_empty_stops_when_database_keeps_failing():
    failure = db_errors.InterfaceError("2013: Lost connection")
    queue = FakeQueue([_item(1)], [_item(1)], [_item(1)])
    report = RecalcWorker(queue, FakeCalculations({1: failure})).run_until_empty()

    assert (report.claimed, report.retried) == (1, 1)
    assert len(queue.released) == 1
