from __future__ import annotations

import logging
import math
import threading
from typing import Callable, Optional, Protocol

from ..core.constants import DEFAULT_ITEMS_PER_WORKER, DEFAULT_MAX_PARALLEL_WORKERS
from .model import DrainResult
from .service import RecalcQueueService
from .worker import RecalcWorker

logger = logging.getLogger(__name__)


class WorkerLauncher(Protocol):
    def launch(self) -> None:
        """Start one independent worker invocation and return immediately."""

        raise NotImplementedError


class ThreadWorkerLauncher(WorkerLauncher):
    """Runs each invocation on a detached daemon thread. Threads are never joined."""

    def __init__(self, worker_factory: Callable[[], RecalcWorker]):
        self._worker_factory = worker_factory

    def _run(self) -> None:
        try:
            self._worker_factory().run_once()
        except Exception:
            logger.exception("Recalculation worker crashed")

    def launch(self) -> None:
        threading.Thread(target=self._run, name="recalc-worker", daemon=True).start()


def workers_needed(pending: int, *, items_per_worker: int, max_workers: int) -> int:
    if pending <= 0:
        return 0
    return min(max_workers, math.ceil(pending / items_per_worker))


class QueueDrainDispatcher:
    def __init__(
        self,
        queue: RecalcQueueService,
        launcher: WorkerLauncher,
        *,
        items_per_worker: int = DEFAULT_ITEMS_PER_WORKER,
        max_workers: int = DEFAULT_MAX_PARALLEL_WORKERS,
    ):
        self._queue = queue
        self._launcher = launcher
        self._items_per_worker = max(1, int(items_per_worker))
        self._max_workers = max(0, int(max_workers))

    def drain(self, max_workers: Optional[int] = None) -> DrainResult:
        """Fire enough workers for the current backlog; never waits for them."""
        cap = self._max_workers if max_workers is None else max(0, min(int(max_workers), self._max_workers))
        pending = self._queue.count_pending()
        wanted = workers_needed(pending, items_per_worker=self._items_per_worker, max_workers=cap)

        fired = 0
        for _ in range(wanted):
            try:
                self._launcher.launch()
            except Exception:
                # Unlaunched items stay pending for the next drain.
                logger.exception("Failed to launch recalculation worker")
                break
            fired += 1

        logger.info("Drain fired %s worker(s) for %s pending item(s)", fired, pending)
        return DrainResult(fired=fired, pending=pending)
