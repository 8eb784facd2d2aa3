from __future__ import annotations

import threading

from src.attendance_recalc.attendance_recalc.recalc.dispatcher import (
    QueueDrainDispatcher,
    ThreadWorkerLauncher,
    workers_needed,
)
from src.attendance_recalc.attendance_recalc.recalc.model import WorkerReport


class FakeQueue:
    def __init__(self, pending: int):
        self.pending = pending

    def count_pending(self) -> int:
        return self.pending


class CountingLauncher:
    def __init__(self, fail_after: int | None = None):
        self.launched = 0
        self._fail_after = fail_after

    def launch(self) -> None:
        if self._fail_after is not None and self.launched >= self._fail_after:
            raise RuntimeError("thread limit")
        self.launched += 1


def test_workers_needed():
    assert workers_needed(0, items_per_worker=10, max_workers=200) == 0
    assert workers_needed(1, items_per_worker=10, max_workers=200) == 1
    assert workers_needed(10, items_per_worker=10, max_workers=200) == 1
    assert workers_needed(11, items_per_worker=10, max_workers=200) == 2
    assert workers_needed(5000, items_per_worker=10, max_workers=200) == 200


def test_drain_fires_ceil_of_backlog():
    launcher = CountingLauncher()
    result = QueueDrainDispatcher(FakeQueue(95), launcher, items_per_worker=10, max_workers=200).drain()

    assert (result.fired, result.pending) == (10, 95)
    assert launcher.launched == 10
    assert result.message == "Fired 10 worker(s) for 95 pending item(s)"


def test_drain_cap_never_exceeds_configured_maximum():
    launcher = CountingLauncher()
    dispatcher = QueueDrainDispatcher(FakeQueue(1000), launcher, items_per_worker=10, max_workers=20)

    assert dispatcher.drain(max_workers=5).fired == 5
    assert dispatcher.drain(max_workers=500).fired == 20


def test_empty_queue_fires_nothing():
    launcher = CountingLauncher()
    result = QueueDrainDispatcher(FakeQueue(0), launcher).drain()

    assert result.to_dict() == {"fired": 0, "pending": 0, "message": "Queue is empty"}
    assert launcher.launched == 0


def test_launch_failure_stops_firing_and_reports_partial_count():
    launcher = CountingLauncher(fail_after=3)
    result = QueueDrainDispatcher(FakeQueue(100), launcher, items_per_worker=10).drain()

    assert result.fired == 3


def test_thread_launcher_returns_without_waiting_for_the_worker():
    release = threading.Event()
    finished = threading.Event()

    class BlockingWorker:
        def run_once(self):
            release.wait(5)
            finished.set()
            return WorkerReport()

    ThreadWorkerLauncher(BlockingWorker).launch()

    assert not finished.is_set()
    release.set()
    assert finished.wait(5)


def test_thread_launcher_survives_worker_crash():
    crashed = threading.Event()

    class CrashingWorker:
        def run_once(self):
            crashed.set()
            raise RuntimeError("db down")

    ThreadWorkerLauncher(CrashingWorker).launch()
    assert crashed.wait(5)
