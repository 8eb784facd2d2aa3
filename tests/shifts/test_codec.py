from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.attendance_recalc.attendance_recalc.core.exceptions import FormatError
from src.attendance_recalc.attendance_recalc.shifts.codec import (
    DAY_OFF,
    DAY_OFF_SEGMENT,
    WorkWindow,
    decode,
    decode_for_date,
    encode,
    sunday_first_weekday,
    validate_template,
)

OFFICE = DAY_OFF_SEGMENT + "09001700" * 5 + DAY_OFF_SEGMENT


def test_decode_office_week():
    assert decode(OFFICE, 0) is DAY_OFF
    assert decode(OFFICE, 6) is DAY_OFF
    for weekday in range(1, 6):
        window = decode(OFFICE, weekday)
        assert window == WorkWindow(start=time(9, 0), end=time(17, 0), crosses_midnight=False)


def test_decode_is_deterministic():
    assert [decode(OFFICE, d) for d in range(7)] == [decode(OFFICE, d) for d in range(7)]


@pytest.mark.parametrize("weekday", range(7))
def test_day_off_sentinel_wins_at_any_position(weekday):
    segments = ["08001600"] * 7
    segments[weekday] = DAY_OFF_SEGMENT
    template = "".join(segments)

    assert decode(template, weekday) is DAY_OFF
    for other in range(7):
        if other != weekday:
            assert isinstance(decode(template, other), WorkWindow)


def test_cross_midnight_window_ends_next_day():
    template = "21000400" * 7
    window = decode(template, 3)

    assert window.crosses_midnight is True
    assert window.start_on(date(2024, 3, 6)) == datetime(2024, 3, 6, 21, 0)
    assert window.end_on(date(2024, 3, 6)) == datetime(2024, 3, 7, 4, 0)
    assert window.duration.total_seconds() == 7 * 3600


@pytest.mark.parametrize(
    "template",
    [
        "",
        OFFICE[:-1],
        OFFICE + "0",
        "0900170X" + OFFICE[8:],
        "25001700" + OFFICE[8:],
        "09601700" + OFFICE[8:],
        "09000900" + OFFICE[8:],
    ],
)
def test_malformed_templates_raise_format_error(template):
    with pytest.raises(FormatError):
        validate_template(template)


def test_weekday_out_of_range():
    with pytest.raises(ValueError):
        decode(OFFICE, 7)


def test_sunday_first_weekday():
    assert sunday_first_weekday(date(2024, 3, 3)) == 0  # Sunday
    assert sunday_first_weekday(date(2024, 3, 4)) == 1  # Monday
    assert sunday_first_weekday(date(2024, 3, 9)) == 6  # Saturday
    assert decode_for_date(OFFICE, date(2024, 3, 3)) is DAY_OFF


def test_encode_builds_template():
    office = WorkWindow(start=time(9, 0), end=time(17, 0), crosses_midnight=False)
    assert encode([DAY_OFF, office, office, office, office, office, DAY_OFF]) == OFFICE

    with pytest.raises(FormatError):
        encode([office] * 6)
