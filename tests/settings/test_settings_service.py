from __future__ import annotations

from datetime import time

import pytest

from src.attendance_recalc.attendance_recalc.core.exceptions import ValidationError
from src.attendance_recalc.attendance_recalc.settings.service import SettingsService


class InMemorySettings:
    def __init__(self, **values):
        self.values = dict(values)

    def get_all(self):
        return dict(self.values)

    def set_many(self, values):
        self.values.update(values)


def test_defaults_when_nothing_stored():
    settings = SettingsService(InMemorySettings()).get()
    assert settings.buffer_time_minutes == 30
    assert settings.working_day_start == time(10, 0)
    assert settings.working_day_enabled is False


def test_invalid_stored_values_fall_back_to_defaults():
    repo = InMemorySettings(buffer_time_minutes="abc", working_day_start="25:99", working_day_enabled="maybe")
    settings = SettingsService(repo).get()
    assert settings.to_dict() == {"buffer_time_minutes": 30, "working_day_start": "10:00", "working_day_enabled": False}


def test_update_validates_and_persists_normalized_values():
    repo = InMemorySettings()
    svc = SettingsService(repo)

    settings = svc.update(buffer_time_minutes="15", working_day_start="6:30", working_day_enabled="on")

    assert repo.values == {"buffer_time_minutes": "15", "working_day_start": "06:30", "working_day_enabled": "true"}
    assert settings.working_day_rule.enabled is True
    assert settings.working_day_rule.start_time == time(6, 30)


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"buffer_time_minutes": -1},
        {"buffer_time_minutes": 241},
        {"working_day_start": "noon"},
        {"working_day_enabled": "sometimes"},
    ],
)
def test_update_rejects_bad_input(kwargs):
    repo = InMemorySettings(buffer_time_minutes="20")
    with pytest.raises(ValidationError):
        SettingsService(repo).update(**kwargs)
    assert repo.values == {"buffer_time_minutes": "20"}
