from datetime import date, datetime

import pytest

from app.core.errors import InvalidDateError
from app.utils.timeslots import (
    day_bounds,
    is_weekend,
    parse_date,
    remaining_slots,
    slot_hour,
    slots_for_date,
)

TUESDAY = date(2025, 6, 10)
SATURDAY = date(2025, 6, 14)
SUNDAY = date(2025, 6, 15)


def test_weekday_calendar_runs_from_eleven_to_twenty_three():
    labels = slots_for_date(TUESDAY)
    assert labels[0] == "11:00"
    assert labels[-1] == "23:00"
    assert len(labels) == 13
    assert "00:00" not in labels


@pytest.mark.parametrize("day", [SATURDAY, SUNDAY])
def test_weekend_calendar_adds_midnight(day):
    labels = slots_for_date(day)
    assert len(labels) == 14
    assert labels[-1] == "00:00"


def test_every_day_of_a_week_has_midnight_only_on_weekends():
    for offset in range(7):
        day = date(2025, 6, 9 + offset)
        assert ("00:00" in slots_for_date(day)) == (day.weekday() >= 5)


def test_calendar_accepts_iso_strings():
    assert slots_for_date("2025-06-14") == slots_for_date(SATURDAY)
    assert is_weekend("2025-06-14")
    assert not is_weekend("2025-06-10")


@pytest.mark.parametrize("value", ["14/06/2025", "2025-13-01", "", "tomorrow", datetime(2025, 6, 14, 12)])
def test_parse_date_rejects_malformed_values(value):
    with pytest.raises(InvalidDateError):
        parse_date(value)


def test_midnight_counts_as_hour_twenty_four():
    assert slot_hour("00:00") == 24
    assert slot_hour("11:00") == 11


def test_remaining_slots_drops_started_hours_today():
    labels = remaining_slots(SATURDAY, datetime(2025, 6, 14, 22, 15))
    assert labels == ["23:00", "00:00"]


def test_remaining_slots_drops_the_current_hour():
    labels = remaining_slots(SATURDAY, datetime(2025, 6, 14, 23, 0))
    assert labels == ["00:00"]


def test_remaining_slots_keeps_everything_on_other_days():
    assert remaining_slots(SATURDAY, datetime(2025, 6, 10, 23, 59)) == slots_for_date(SATURDAY)


def test_no_remaining_label_has_started_at_any_hour():
    for hour in range(24):
        now = datetime(2025, 6, 14, hour, 30)
        assert all(slot_hour(label) > hour for label in remaining_slots(SATURDAY, now))


def test_day_bounds_cover_one_local_day():
    start, end = day_bounds(TUESDAY)
    assert start == datetime(2025, 6, 10)
    assert end == datetime(2025, 6, 11)
