"""Layout system exceptions."""

from ..utils.exceptions import AgendaError


class LayoutError(AgendaError):
    """Base exception for layout system errors."""


class InvalidHourRangeError(LayoutError):
    """Raised when a rendered hour range is empty or outside 0-24."""
