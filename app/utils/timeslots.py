from datetime import date, datetime, time, timedelta
from typing import List, Tuple, Union

from app.core.errors import InvalidDateError

OPENING_HOUR = 11
LAST_SEATING_HOUR = 23
LATE_SLOT = "00:00"   # extra midnight seating, weekends only

_WEEKDAY_SLOTS = tuple(f"{hour:02d}:00" for hour in range(OPENING_HOUR, LAST_SEATING_HOUR + 1))
_WEEKEND_SLOTS = _WEEKDAY_SLOTS + (LATE_SLOT,)


def parse_date(value: Union[date, str]) -> date:
    """Accept a date or a 'YYYY-MM-DD' string. Datetimes are rejected: slots are calendar-day only."""
    if isinstance(value, datetime):
        raise InvalidDateError()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidDateError() from None
    raise InvalidDateError()


def is_weekend(day: Union[date, str]) -> bool:
    return parse_date(day).weekday() >= 5


def slots_for_date(day: Union[date, str]) -> List[str]:
    """
    Every bookable time label for a date, in service order.

    11:00 through 23:00 every day, plus 00:00 on Saturdays and Sundays.
    """
    return list(_WEEKEND_SLOTS if is_weekend(day) else _WEEKDAY_SLOTS)


def slot_hour(label: str) -> int:
    """Hour of a label for "already passed" comparisons; midnight counts as 24."""
    hour = int(label.split(":")[0])
    return 24 if hour == 0 else hour


def remaining_slots(day: date, now: datetime) -> List[str]:
    """
    Labels still bookable on `day` as seen at `now`.

    Only today is filtered: a label is gone once its hour is <= the current hour.
    """
    labels = slots_for_date(day)
    if day != now.date():
        return labels
    return [label for label in labels if slot_hour(label) > now.hour]


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[local midnight, next local midnight) for a calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)
