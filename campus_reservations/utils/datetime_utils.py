"""
Date and time utilities for the reservation service.

Slot dates and times are wall-clock values in the campus reference
timezone. Comparisons against "now" are done on naive local datetimes
obtained from a :class:`Clock`.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Tuple, Union

import pytz
from dateutil import parser
from dateutil.relativedelta import relativedelta


class DateTimeHelper:
    """Date and time manipulation utilities"""

    @staticmethod
    def now(timezone: str = 'UTC') -> datetime:
        """Get current datetime in specified timezone"""
        tz_obj = pytz.timezone(timezone)
        return datetime.now(tz_obj)

    @staticmethod
    def today(timezone: str = 'UTC') -> date:
        """Get current date in specified timezone"""
        tz_obj = pytz.timezone(timezone)
        return datetime.now(tz_obj).date()

    @staticmethod
    def parse_time(value: Union[str, time]) -> time:
        """Parse ``HH:MM`` / ``HH:MM:SS`` strings into a time"""
        if isinstance(value, time):
            return value
        return parser.parse(value).time()

    @staticmethod
    def combine(day: date, at: time) -> datetime:
        """Naive local datetime for a slot boundary"""
        return datetime.combine(day, at)

    @staticmethod
    def month_bounds(year: int, month: int) -> Tuple[date, date]:
        """First and last calendar day of a month"""
        first = date(year, month, 1)
        last = first + relativedelta(months=1) - timedelta(days=1)
        return first, last

    @staticmethod
    def days_in_month(year: int, month: int) -> int:
        return calendar.monthrange(year, month)[1]

    @staticmethod
    def parse_month(value: str) -> Tuple[int, int]:
        """Parse a ``YYYY-MM`` string"""
        try:
            parsed = datetime.strptime(value, "%Y-%m")
        except (TypeError, ValueError):
            raise ValueError(f"Invalid month, expected YYYY-MM: {value}")
        return parsed.year, parsed.month

    @staticmethod
    def hours_between(start: datetime, end: datetime) -> float:
        return (end - start).total_seconds() / 3600


class Clock:
    """
    Source of "now" in the reference timezone.

    Services take a clock instead of calling ``datetime.now`` so tests can
    pin the current time.
    """

    def __init__(self, timezone: str = 'UTC'):
        self.timezone_name = timezone
        self.tz = pytz.timezone(timezone)

    def now(self) -> datetime:
        """Timezone-aware current time"""
        return datetime.now(self.tz)

    def local_now(self) -> datetime:
        """Naive wall-clock time in the reference timezone"""
        return self.now().replace(tzinfo=None)

    def today(self) -> date:
        return self.local_now().date()

    def localize(self, value: datetime) -> datetime:
        """Attach the reference timezone to a naive local datetime"""
        if value.tzinfo is not None:
            return value.astimezone(self.tz)
        return self.tz.localize(value)
