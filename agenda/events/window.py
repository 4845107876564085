"""Occurrence windows: deciding which events are active on a calendar date."""

from collections.abc import Iterable

from ..dates import DateLike, format_local_date
from .models import Event


def occurs_on(event: Event, calendar_date: DateLike) -> bool:
    """Check if the event is active on the given date.

    True on the event's own date, or anywhere inside the inclusive
    ``[date, end_date]`` window when an end date is set. Recurrence plays no
    part here; each generated instance carries its own window.
    """
    day = format_local_date(calendar_date)
    if day == event.date:
        return True
    if event.end_date:
        return event.date <= day <= event.end_date
    return False


def events_for_date(events: Iterable[Event], calendar_date: DateLike) -> list[Event]:
    """Select the events active on a date, keeping collection order."""
    day = format_local_date(calendar_date)
    return [event for event in events if occurs_on(event, day)]


def split_all_day(events: Iterable[Event]) -> tuple[list[Event], list[Event]]:
    """Partition events into (all-day, timed) lists, keeping order."""
    all_day: list[Event] = []
    timed: list[Event] = []
    for event in events:
        (all_day if event.is_all_day else timed).append(event)
    return all_day, timed
