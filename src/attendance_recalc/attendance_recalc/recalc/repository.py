from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional, Protocol, Sequence, Tuple

from ..core.enums import QueueStatus
from .model import QueueItem


class RecalcQueueRepository(Protocol):
    def enqueue_many(self, pairs: Sequence[Tuple[int, date]], *, now: datetime) -> int:
        """Upsert (employee_id, work_date) keys.

        New keys and done/failed keys become pending; pending and processing
        keys are left untouched.
        """

        raise NotImplementedError

    def claim(self, limit: int, *, now: datetime) -> Sequence[QueueItem]:
        """Atomically move up to `limit` pending items to processing.

        Concurrent callers never receive the same item.
        """

        raise NotImplementedError

    def mark(self, item_id: int, status: QueueStatus, *, now: datetime, error: Optional[str] = None) -> None:
        raise NotImplementedError

    def release(self, item_id: int, *, error: Optional[str] = None) -> None:
        """Return a processing item to pending so a later claim retries it."""

        raise NotImplementedError

    def count_pending(self) -> int:
        raise NotImplementedError

    def status_counts(self, *, since: datetime) -> Dict[QueueStatus, int]:
        """Item counts per status among items queued at or after `since`."""

        raise NotImplementedError

    def list_processing_before(self, cutoff: datetime) -> Sequence[QueueItem]:
        raise NotImplementedError

    def reset_processing_before(self, cutoff: datetime, *, now: datetime) -> int:
        raise NotImplementedError
