"""Events, recurrence rules and series identity."""

from .exceptions import EventError, EventNotFoundError, RecurrenceValidationError
from .models import (
    Event,
    EventPatch,
    RecurrenceConfig,
    RecurrenceEndType,
    RecurrenceType,
    Visibility,
)
from .recurrence import ExpanderConfig, RecurrenceExpander, expand
from .series import (
    is_child,
    is_part_of_series,
    is_root_with_children,
    series_members,
    series_root_id,
    shows_recurring_marker,
)
from .validation import is_recurring_rule, normalize_recurrence, validate_recurrence
from .window import events_for_date, occurs_on, split_all_day

__all__ = [
    "Event",
    "EventError",
    "EventNotFoundError",
    "EventPatch",
    "ExpanderConfig",
    "RecurrenceConfig",
    "RecurrenceEndType",
    "RecurrenceExpander",
    "RecurrenceType",
    "RecurrenceValidationError",
    "Visibility",
    "events_for_date",
    "expand",
    "is_child",
    "is_part_of_series",
    "is_recurring_rule",
    "is_root_with_children",
    "normalize_recurrence",
    "occurs_on",
    "series_members",
    "series_root_id",
    "shows_recurring_marker",
    "split_all_day",
    "validate_recurrence",
]
