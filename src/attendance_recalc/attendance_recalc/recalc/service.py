from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..attendance.model import PunchLog
from ..calculations.repository import CalculationRepository
from ..common.datetime_utils import iter_dates, now_local
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_STATUS_WINDOW_MINUTES, EARLY_ARRIVAL_MINUTES
from ..core.enums import QueueStatus
from ..core.exceptions import ValidationError
from .model import QueueItem, QueueProgress
from .repository import RecalcQueueRepository

logger = logging.getLogger(__name__)

_TERMINAL = (QueueStatus.DONE, QueueStatus.FAILED)


class RecalcQueueService:
    """Durable backlog of (employee, date) pairs awaiting recalculation."""

    def __init__(
        self,
        queue: RecalcQueueRepository,
        *,
        status_window_minutes: int = DEFAULT_STATUS_WINDOW_MINUTES,
        calculations: CalculationRepository | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._queue = queue
        self._calculations = calculations
        self._status_window = timedelta(minutes=int(status_window_minutes))
        self._clock = clock

    def enqueue(self, employee_id: int, work_date: date) -> int:
        return self.enqueue_many([(employee_id, work_date)])

    def enqueue_range(self, employee_id: int, date_from: date, date_to: date) -> int:
        require_date_range(date_from, date_to)
        return self.enqueue_many((employee_id, d) for d in iter_dates(date_from, date_to))

    def enqueue_many(self, pairs: Iterable[Tuple[int, date]]) -> int:
        keys = sorted({(int(employee_id), work_date) for employee_id, work_date in pairs})
        if not keys:
            return 0
        count = self._queue.enqueue_many(keys, now=self._clock())
        logger.info("Queued %s day(s) for recalculation", count)
        return count

    def enqueue_employees(self, employee_ids: Iterable[int], date_from: date, date_to: date) -> int:
        require_date_range(date_from, date_to)
        dates = list(iter_dates(date_from, date_to))
        return self.enqueue_many((employee_id, d) for employee_id in employee_ids for d in dates)

    def enqueue_punches(self, punches: Iterable[PunchLog]) -> int:
        """A punch can belong to its own date, the previous date's overnight shift,
        or, shortly before midnight, the next date's early arrival.
        """
        early = timedelta(minutes=EARLY_ARRIVAL_MINUTES)
        pairs: List[Tuple[int, date]] = []
        for punch in punches:
            if not isinstance(punch.punch_time, datetime):
                logger.warning("Skipping punch %s with malformed timestamp %r", punch.log_id, punch.punch_time)
                continue
            punch_date = punch.punch_time.date()
            pairs.append((punch.employee_id, punch_date))
            pairs.append((punch.employee_id, punch_date - timedelta(days=1)))
            next_date = punch_date + timedelta(days=1)
            if punch.punch_time >= datetime.combine(next_date, time.min) - early:
                pairs.append((punch.employee_id, next_date))
        return self.enqueue_many(pairs)

    def enqueue_finished_shifts(self) -> int:
        """End-of-shift sweep: queue days that were cached while their shift was still running."""
        if self._calculations is None:
            return 0
        keys = self._calculations.list_provisional(now=self._clock())
        if keys:
            logger.info("Re-queueing %s day(s) whose shift ended after they were calculated", len(keys))
        return self.enqueue_many(keys)

    def claim_batch(self, n: int) -> Sequence[QueueItem]:
        if n <= 0:
            return []
        return self._queue.claim(int(n), now=self._clock())

    def complete(self, item: QueueItem, outcome: QueueStatus, error: Optional[str] = None) -> None:
        if outcome not in _TERMINAL:
            raise ValidationError(f"Queue items complete as done or failed, not {outcome.value}")
        self._queue.mark(item.item_id, outcome, now=self._clock(), error=error)

    def release(self, item: QueueItem, error: Optional[str] = None) -> None:
        self._queue.release(item.item_id, error=error)

    def count_pending(self) -> int:
        return self._queue.count_pending()

    def progress(self, window_minutes: Optional[int] = None) -> QueueProgress:
        window = timedelta(minutes=int(window_minutes)) if window_minutes is not None else self._status_window
        counts = self._queue.status_counts(since=self._clock() - window)
        return QueueProgress(
            pending=counts.get(QueueStatus.PENDING, 0),
            processing=counts.get(QueueStatus.PROCESSING, 0),
            done=counts.get(QueueStatus.DONE, 0),
            failed=counts.get(QueueStatus.FAILED, 0),
        )

    def stuck_items(self, older_than_minutes: int) -> Sequence[QueueItem]:
        return self._queue.list_processing_before(self._clock() - timedelta(minutes=int(older_than_minutes)))

    def reset_stuck(self, older_than_minutes: int) -> int:
        """Operator action: return items stuck in processing to pending."""
        now = self._clock()
        count = self._queue.reset_processing_before(now - timedelta(minutes=int(older_than_minutes)), now=now)
        logger.warning("Reset %s stuck queue item(s) older than %s minutes", count, older_than_minutes)
        return count

    def enqueue_recent(self, employee_ids: Iterable[int], *, days: int) -> int:
        """Queue the last `days` dates, today included, for each employee."""
        today = self._clock().date()
        return self.enqueue_employees(employee_ids, today - timedelta(days=max(1, int(days)) - 1), today)
