"""Congregation agenda - recurrence expansion and calendar layout core."""

__version__ = "1.0.0"
__author__ = "Agenda Team"
__description__ = "Recurring event series and day-view layout for congregation calendars"

# Package metadata
__all__ = [
    "__author__",
    "__description__",
    "__version__",
]
