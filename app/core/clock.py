from datetime import date, datetime


class Clock:
    """
    Source of "now" for every day-scoped decision (availability, queue window).

    Times are local and timezone-naive: booking dates and queue days follow the
    restaurant's wall clock, not UTC.
    """

    def now(self) -> datetime:
        return datetime.now()

    def today(self) -> date:
        return self.now().date()


system_clock = Clock()


def get_clock() -> Clock:
    return system_clock
