from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_int_range
from ..core.constants import DEFAULT_BUFFER_MINUTES, DEFAULT_WORKING_DAY_START, MAX_BUFFER_MINUTES
from ..core.exceptions import ValidationError
from .model import BUFFER_TIME_KEY, WORKING_DAY_ENABLED_KEY, WORKING_DAY_START_KEY, CompanySettings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValidationError(f"{field_name} must be true or false")


class SettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get(self) -> CompanySettings:
        stored = self._settings.get_all()

        buffer_minutes = DEFAULT_BUFFER_MINUTES
        if stored.get(BUFFER_TIME_KEY) not in (None, ""):
            try:
                buffer_minutes = require_int_range(
                    stored[BUFFER_TIME_KEY], BUFFER_TIME_KEY, min_value=0, max_value=MAX_BUFFER_MINUTES
                )
            except ValidationError:
                logger.warning("Ignoring stored %s=%r", BUFFER_TIME_KEY, stored[BUFFER_TIME_KEY])

        start = DEFAULT_WORKING_DAY_START
        if stored.get(WORKING_DAY_START_KEY):
            try:
                start = parse_hhmm(stored[WORKING_DAY_START_KEY])
            except ValueError:
                logger.warning("Ignoring stored %s=%r", WORKING_DAY_START_KEY, stored[WORKING_DAY_START_KEY])

        enabled = False
        if stored.get(WORKING_DAY_ENABLED_KEY) not in (None, ""):
            try:
                enabled = _parse_bool(stored[WORKING_DAY_ENABLED_KEY], WORKING_DAY_ENABLED_KEY)
            except ValidationError:
                logger.warning("Ignoring stored %s=%r", WORKING_DAY_ENABLED_KEY, stored[WORKING_DAY_ENABLED_KEY])

        return CompanySettings(buffer_time_minutes=buffer_minutes, working_day_start=start, working_day_enabled=enabled)

    def update(
        self,
        *,
        buffer_time_minutes: Optional[Any] = None,
        working_day_start: Optional[str] = None,
        working_day_enabled: Optional[Any] = None,
    ) -> CompanySettings:
        values: Dict[str, str] = {}
        if buffer_time_minutes is not None:
            minutes = require_int_range(
                buffer_time_minutes, BUFFER_TIME_KEY, min_value=0, max_value=MAX_BUFFER_MINUTES
            )
            values[BUFFER_TIME_KEY] = str(minutes)
        if working_day_start is not None:
            try:
                start = parse_hhmm(str(working_day_start))
            except ValueError:
                raise ValidationError(f"{WORKING_DAY_START_KEY} must be HH:MM")
            values[WORKING_DAY_START_KEY] = start.strftime("%H:%M")
        if working_day_enabled is not None:
            enabled = _parse_bool(working_day_enabled, WORKING_DAY_ENABLED_KEY)
            values[WORKING_DAY_ENABLED_KEY] = "true" if enabled else "false"

        if not values:
            raise ValidationError("No settings to update")

        self._settings.set_many(values)
        logger.info("Company settings updated: %s", ", ".join(sorted(values)))
        return self.get()
