"""Calendar-date arithmetic for a single ambient local calendar.

Dates cross the library boundary as ``YYYY-MM-DD`` strings. Internally they are
naive datetimes anchored at a neutral mid-day hour, so adding days, weeks,
months or years can never slide a value into the previous or next calendar
day, whatever the host clock does around daylight-saving transitions.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Union

from dateutil.relativedelta import relativedelta

from ..utils.exceptions import AgendaError

NEUTRAL_HOUR = 12

# Weekday numbering used by the calendar views (0 = Sunday ... 6 = Saturday)
SUNDAY = 0

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

DateLike = Union[str, date, datetime]


class InvalidDateError(AgendaError, ValueError):
    """Raised when a date or time string is not in the expected format.

    Also a ``ValueError`` so pydantic validators surface it as a validation error.
    """


class DateUnit(str, Enum):
    """Units accepted by :func:`add_period`."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


def anchor(value: datetime) -> datetime:
    """Re-anchor a datetime to the neutral hour of its calendar day."""
    return value.replace(hour=NEUTRAL_HOUR, minute=0, second=0, microsecond=0)


def parse_local_date(text: str) -> datetime:
    """Parse a ``YYYY-MM-DD`` string into a noon-anchored local datetime.

    Args:
        text: Calendar date string

    Returns:
        Naive datetime at 12:00 on the given day

    Raises:
        InvalidDateError: If the string is malformed or names a non-existent day
    """
    match = _DATE_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise InvalidDateError(f"Invalid date {text!r}, expected YYYY-MM-DD")

    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, NEUTRAL_HOUR)
    except ValueError as e:
        raise InvalidDateError(f"Invalid date {text!r}: {e}") from e


def to_date(value: DateLike) -> date:
    """Coerce a date string, date or datetime into a plain :class:`date`."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_local_date(value).date()


def format_local_date(value: DateLike) -> str:
    """Format a date-like value as ``YYYY-MM-DD``."""
    return to_date(value).isoformat()


def end_of_day(value: DateLike) -> datetime:
    """Return the last representable instant of the value's calendar day."""
    day = to_date(value)
    return datetime(day.year, day.month, day.day, 23, 59, 59, 999999)


def add_period(value: datetime, unit: Union[DateUnit, str], amount: int) -> datetime:
    """Add ``amount`` units to a datetime.

    Month and year steps use ``relativedelta``, which clamps to the last valid
    day of the target month: Jan 31 + 1 month is Feb 28 (Feb 29 in leap years)
    and Feb 29 + 1 year is Feb 28. The day never rolls into the next month.

    Args:
        value: Starting datetime (normally noon-anchored)
        unit: One of days, weeks, months, years
        amount: Number of units, may be negative

    Returns:
        Shifted datetime with the time of day preserved
    """
    unit = DateUnit(unit)
    if unit is DateUnit.DAYS:
        return value + timedelta(days=amount)
    if unit is DateUnit.WEEKS:
        return value + timedelta(weeks=amount)
    if unit is DateUnit.MONTHS:
        return value + relativedelta(months=amount)
    return value + relativedelta(years=amount)


def compare_dates(first: DateLike, second: DateLike) -> int:
    """Three-way comparison of two calendar dates.

    Returns:
        -1 if ``first`` is earlier, 0 if equal, 1 if later
    """
    a, b = to_date(first), to_date(second)
    return (a > b) - (a < b)


def parse_time_to_minutes(text: str) -> int:
    """Convert an ``HH:MM`` 24-hour string into minutes since midnight.

    Raises:
        InvalidDateError: If the string is not a valid time of day
    """
    match = _TIME_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise InvalidDateError(f"Invalid time {text!r}, expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidDateError(f"Invalid time {text!r}, out of range")
    return hours * 60 + minutes


def _sunday_based_weekday(day: date) -> int:
    # date.weekday() is Monday=0; views number Sunday=0
    return (day.weekday() + 1) % 7


def week_dates(reference: DateLike, week_starts_on: int = SUNDAY) -> list[date]:
    """Return the seven dates of the week containing ``reference``.

    Args:
        reference: Any day inside the wanted week
        week_starts_on: First weekday of the week, 0 = Sunday ... 6 = Saturday

    Returns:
        Seven consecutive dates starting on ``week_starts_on``
    """
    day = to_date(reference)
    offset = (_sunday_based_weekday(day) - week_starts_on) % 7
    start = day - timedelta(days=offset)
    return [start + timedelta(days=i) for i in range(7)]


def month_grid(year: int, month: int) -> tuple[int, int]:
    """Describe a Sunday-first month grid.

    Returns:
        (number of blank cells before day 1, number of days in the month)
    """
    first = date(year, month, 1)
    return _sunday_based_weekday(first), calendar.monthrange(year, month)[1]
