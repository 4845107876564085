"""Series identity: which events belong together and who owns the series.

A series is never stored as its own record. It is the root event plus every
event whose ``parent_event_id`` points at the root, and all answers here are
derived from that data shape alone.
"""

from collections.abc import Iterable

from .models import Event
from .validation import is_recurring_rule


def is_child(event: Event) -> bool:
    """Check if the event is a generated instance of some series."""
    return bool(event.parent_event_id)


def is_root_with_children(event: Event, events: Iterable[Event]) -> bool:
    """Check if any other event in the collection points at this one as its root."""
    if not event.id:
        return False
    return any(other.parent_event_id == event.id for other in events if other is not event)


def is_part_of_series(event: Event, events: Iterable[Event]) -> bool:
    """Check if editing or deleting this event needs an occurrence-or-series choice."""
    return is_child(event) or is_root_with_children(event, events)


def series_root_id(event: Event) -> str:
    """Return the id of the root owning the event's series (its own id for roots)."""
    root_id = event.parent_event_id or event.id
    if root_id is None:
        raise ValueError("Event has no id and no parent, it belongs to no stored series")
    return root_id


def series_members(root_id: str, events: Iterable[Event]) -> list[Event]:
    """Return the root and its children, in collection order."""
    return [
        event for event in events if event.id == root_id or event.parent_event_id == root_id
    ]


def shows_recurring_marker(event: Event) -> bool:
    """Check if calendar views should draw the repeat marker on this event."""
    return is_recurring_rule(event.recurrence) or is_child(event)
