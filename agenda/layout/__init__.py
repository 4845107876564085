"""Day and week layout of timed events."""

from .exceptions import InvalidHourRangeError, LayoutError
from .overlap import (
    DayLayout,
    HourRange,
    PositionedEvent,
    layout,
    layout_day,
    layout_week,
    now_offset,
    vertical_span,
)

__all__ = [
    "DayLayout",
    "HourRange",
    "InvalidHourRangeError",
    "LayoutError",
    "PositionedEvent",
    "layout",
    "layout_day",
    "layout_week",
    "now_offset",
    "vertical_span",
]
