from __future__ import annotations

import logging
import time
from typing import Callable

from mysql.connector import errors as db_errors

from ..calculations.service import CalculationService
from ..core.constants import DEFAULT_ITEMS_PER_WORKER, DEFAULT_WORKER_TIMEOUT_SECONDS
from ..core.enums import QueueStatus
from ..core.exceptions import DomainError
from .model import WorkerReport
from .service import RecalcQueueService

logger = logging.getLogger(__name__)

# Connection-level failures: the item is fine, the database was not.
_TRANSIENT_ERRORS = (db_errors.OperationalError, db_errors.InterfaceError)


class RecalcWorker:
    """One short-lived worker invocation: claim a batch, recompute, mark.

    Items still unprocessed when the deadline passes are left in processing.
    They are not reclaimed automatically. Items hit by a lost database
    connection go back to pending; every other error fails the item.
    """

    def __init__(
        self,
        queue: RecalcQueueService,
        calculations: CalculationService,
        *,
        batch_size: int = DEFAULT_ITEMS_PER_WORKER,
        timeout_seconds: float = DEFAULT_WORKER_TIMEOUT_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self._queue = queue
        self._calculations = calculations
        self._batch_size = int(batch_size)
        self._timeout = float(timeout_seconds)
        self._monotonic = monotonic

    def run_once(self) -> WorkerReport:
        deadline = self._monotonic() + self._timeout
        items = self._queue.claim_batch(self._batch_size)
        if not items:
            return WorkerReport()

        done = failed = retried = 0
        for index, item in enumerate(items):
            if self._monotonic() >= deadline:
                abandoned = len(items) - index
                logger.warning("Worker deadline reached; %s claimed item(s) left in processing", abandoned)
                return WorkerReport(
                    claimed=len(items), done=done, failed=failed, abandoned=abandoned, retried=retried
                )

            try:
                self._calculations.recompute(item.employee_id, item.work_date)
            except DomainError as e:
                logger.warning(
                    "Recalculation failed for employee %s on %s: %s", item.employee_id, item.work_date, e
                )
                self._queue.complete(item, QueueStatus.FAILED, str(e))
                failed += 1
            except _TRANSIENT_ERRORS as e:
                logger.warning(
                    "Database unavailable recalculating employee %s on %s; item returned to pending: %s",
                    item.employee_id,
                    item.work_date,
                    e,
                )
                self._queue.release(item, f"{type(e).__name__}: {e}")
                retried += 1
            except Exception as e:
                logger.exception("Unexpected error recalculating employee %s on %s", item.employee_id, item.work_date)
                self._queue.complete(item, QueueStatus.FAILED, f"{type(e).__name__}: {e}")
                failed += 1
            else:
                self._queue.complete(item, QueueStatus.DONE)
                done += 1

        logger.info(
            "Worker processed %s item(s): %s done, %s failed, %s retried", len(items), done, failed, retried
        )
        return WorkerReport(claimed=len(items), done=done, failed=failed, retried=retried)

    def run_until_empty(self) -> WorkerReport:
        """Keep claiming until the queue has nothing pending (scripts).

        Stops early when a whole batch was returned to pending, so a database
        outage does not spin.
        """
        total = WorkerReport()
        while True:
            report = self.run_once()
            if report.claimed == 0:
                return total
            total = WorkerReport(
                claimed=total.claimed + report.claimed,
                done=total.done + report.done,
                failed=total.failed + report.failed,
                abandoned=total.abandoned + report.abandoned,
                retried=total.retried + report.retried,
            )
            if report.retried == report.claimed:
                return total
