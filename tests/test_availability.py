from datetime import date, datetime

import pytest

from app.core.errors import PastDateError
from app.models.booking import Environment
from app.services.availability import is_blocked, resolve_availability
from app.services.blocked_slots import create_block
from app.services.bookings import create_booking

SATURDAY = date(2025, 6, 14)


def test_open_day_is_fully_available(db, clock):
    availability = resolve_availability(db, SATURDAY, clock)

    assert availability.date == SATURDAY
    assert availability.is_weekend is True
    assert [s.time for s in availability.time_slots][-1] == "00:00"
    assert all(s.available_indoor and s.available_outdoor for s in availability.time_slots)


def test_past_dates_are_rejected(db, clock):
    with pytest.raises(PastDateError):
        resolve_availability(db, date(2025, 6, 9), clock)


def test_today_is_allowed_and_started_hours_are_hidden(db, clock):
    clock.current = datetime(2025, 6, 10, 19, 0)

    availability = resolve_availability(db, date(2025, 6, 10), clock)

    assert availability.is_weekend is False
    assert [s.time for s in availability.time_slots] == ["20:00", "21:00", "22:00", "23:00"]


def test_booking_only_takes_its_own_environment(db, clock, booking_data):
    create_booking(db, booking_data(time_slot="19:00", environment="INDOOR"), clock)

    slot = resolve_availability(db, SATURDAY, clock).slot("19:00")

    assert slot.available_indoor is False
    assert slot.available_outdoor is True


def test_both_areas_block_takes_both_environments(db, clock):
    create_block(db, SATURDAY, "20:00", clock)

    slot = resolve_availability(db, SATURDAY, clock).slot("20:00")

    assert slot.available_indoor is False
    assert slot.available_outdoor is False
    assert is_blocked(db, SATURDAY, "20:00", Environment.OUTDOOR)


def test_area_block_leaves_the_other_area_open(db, clock):
    create_block(db, SATURDAY, "21:00", clock, environment=Environment.OUTDOOR)

    slot = resolve_availability(db, SATURDAY, clock).slot("21:00")

    assert slot.available_indoor is True
    assert slot.available_outdoor is False
    assert not is_blocked(db, SATURDAY, "21:00", Environment.INDOOR)


def test_excluded_booking_does_not_occupy_its_slot(db, clock, booking_data):
    booking = create_booking(db, booking_data(time_slot="12:00"), clock)

    slot = resolve_availability(db, SATURDAY, clock, exclude_booking_id=booking.id).slot("12:00")

    assert slot.available_indoor is True


def test_resolver_covers_other_dates_independently(db, clock, booking_data):
    create_booking(db, booking_data(date="2025-06-15", time_slot="19:00"), clock)

    assert resolve_availability(db, SATURDAY, clock).slot("19:00").available_indoor is True
