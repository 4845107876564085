"""Local calendar date arithmetic."""

from .local_date import (
    NEUTRAL_HOUR,
    SUNDAY,
    DateLike,
    DateUnit,
    InvalidDateError,
    add_period,
    anchor,
    compare_dates,
    end_of_day,
    format_local_date,
    month_grid,
    parse_local_date,
    parse_time_to_minutes,
    to_date,
    week_dates,
)

__all__ = [
    "NEUTRAL_HOUR",
    "SUNDAY",
    "DateLike",
    "DateUnit",
    "InvalidDateError",
    "add_period",
    "anchor",
    "compare_dates",
    "end_of_day",
    "format_local_date",
    "month_grid",
    "parse_local_date",
    "parse_time_to_minutes",
    "to_date",
    "week_dates",
]
