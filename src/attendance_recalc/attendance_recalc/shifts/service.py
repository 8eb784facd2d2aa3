from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.validators import require_int_range, require_non_empty
from ..core.constants import DEFAULT_RECALC_LOOKBACK_DAYS, MAX_BUFFER_MINUTES, TEMPLATE_ID_MAX, TEMPLATE_ID_MIN
from ..core.exceptions import NotFoundError
from ..employees.repository import EmployeeRepository
from ..recalc.dispatcher import QueueDrainDispatcher
from ..recalc.service import RecalcQueueService
from .codec import validate_template
from .model import ShiftTemplate
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


class ShiftService:
    def __init__(
        self,
        shifts: ShiftRepository,
        *,
        employees: EmployeeRepository,
        queue: RecalcQueueService,
        dispatcher: QueueDrainDispatcher | None = None,
        lookback_days: int = DEFAULT_RECALC_LOOKBACK_DAYS,
    ):
        self._shifts = shifts
        self._employees = employees
        self._queue = queue
        self._dispatcher = dispatcher
        self._lookback_days = int(lookback_days)

    def list_all(self) -> Sequence[ShiftTemplate]:
        return self._shifts.list_all()

    def get(self, template_id: int) -> ShiftTemplate:
        template = self._shifts.get_by_id(int(template_id))
        if template is None:
            raise NotFoundError(f"Shift template {template_id} not found")
        return template

    def save(
        self,
        *,
        template_id: Any,
        name: str,
        tz_string: str,
        buffer_minutes: Optional[Any] = None,
    ) -> tuple:
        """Create or replace a template and queue recent days of everyone using it.

        Returns (template, days_queued, workers_fired).
        """

        template_id = require_int_range(template_id, "template_id", min_value=TEMPLATE_ID_MIN, max_value=TEMPLATE_ID_MAX)
        name = require_non_empty(name or "", "name")
        tz_string = validate_template((tz_string or "").strip())
        if buffer_minutes in (None, ""):
            buffer_minutes = None
        else:
            buffer_minutes = require_int_range(buffer_minutes, "buffer_minutes", min_value=0, max_value=MAX_BUFFER_MINUTES)

        template = ShiftTemplate(template_id=template_id, name=name, tz_string=tz_string, buffer_minutes=buffer_minutes)
        self._shifts.upsert(template)
        logger.info("Shift template %s (%s) saved", template_id, name)

        affected = self._employees.list_ids_using_template(template_id)
        days = self._queue.enqueue_recent(affected, days=self._lookback_days) if affected else 0
        fired = self._dispatcher.drain().fired if self._dispatcher and days else 0
        return template, days, fired
