"""Event- and series-specific exceptions for error handling."""

from typing import Optional

from ..utils.exceptions import AgendaError


class EventError(AgendaError):
    """Base exception for event and series errors."""


class RecurrenceValidationError(EventError):
    """Raised when a recurrence rule is rejected before expansion.

    Carries every problem found so a form can report them all at once.
    """

    def __init__(self, message: str, problems: Optional[list[str]] = None):
        super().__init__(message)
        self.problems = problems or [message]


class EventNotFoundError(EventError):
    """Raised when a mutation targets an event the store does not hold."""

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id
