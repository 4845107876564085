"""Column assignment for timed events that overlap on one displayed day.

The engine is purely positional: it reads start and end times and produces a
column index and column count per event, plus the vertical geometry that
views need to draw the day between the configured hours.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..dates import DateLike, to_date, week_dates
from ..events.models import Event
from ..events.window import events_for_date, split_all_day
from .exceptions import InvalidHourRangeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourRange:
    """Hours drawn by the day and week views, ``[start_hour, end_hour)``."""

    start_hour: int = 6
    end_hour: int = 24

    def __post_init__(self) -> None:
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise InvalidHourRangeError(
                f"Invalid hour range {self.start_hour}-{self.end_hour}, "
                "expected 0 <= start < end <= 24"
            )

    @classmethod
    def from_settings(cls, settings: Any) -> "HourRange":
        """Build the range from ``settings.layout``, falling back to the defaults."""
        layout_settings = getattr(settings, "layout", None)
        return cls(
            start_hour=getattr(layout_settings, "day_start_hour", 6),
            end_hour=getattr(layout_settings, "day_end_hour", 24),
        )

    @property
    def hours(self) -> int:
        return self.end_hour - self.start_hour

    def hour_labels(self) -> list[int]:
        """Hour rows of the grid: 6, 7, ... 23 for the default range."""
        return list(range(self.start_hour, self.end_hour))


@dataclass(frozen=True)
class PositionedEvent:
    """An event with the column it occupies inside its overlap cluster."""

    event: Event
    column_index: int
    columns_count: int

    @property
    def horizontal_slot(self) -> tuple[float, float]:
        """Left and right edges as fractions of the day column width."""
        return (
            self.column_index / self.columns_count,
            (self.column_index + 1) / self.columns_count,
        )


MINUTES_PER_DAY = 24 * 60


def _drawn_end_minutes(event: Event) -> int:
    """End minutes as drawn; an event running past midnight ends with the day."""
    end = event.end_minutes
    return MINUTES_PER_DAY if end < event.start_minutes else end


def _overlaps(first: Event, second: Event) -> bool:
    # Strict comparison: back-to-back events share no column
    return (
        first.start_minutes < _drawn_end_minutes(second)
        and _drawn_end_minutes(first) > second.start_minutes
    )


def layout(timed_events: Iterable[Event]) -> list[PositionedEvent]:
    """Assign columns to the timed events of one day.

    Events are ordered by start time, ties keeping their input order. Each
    event joins the first cluster holding a member it overlaps, otherwise it
    opens a new cluster. Inside a cluster the column index is the insertion
    order and every member shares the cluster size as its column count, even
    members that never overlap each other directly. An event whose end time
    is before its start time runs to the end of the day.

    Args:
        timed_events: Non all-day events occurring on the day being drawn

    Returns:
        Positioned events grouped cluster by cluster, in cluster creation order
    """
    ordered = sorted(timed_events, key=lambda event: event.start_minutes)

    clusters: list[list[Event]] = []
    for event in ordered:
        for cluster in clusters:
            if any(_overlaps(event, member) for member in cluster):
                cluster.append(event)
                break
        else:
            clusters.append([event])

    positioned = [
        PositionedEvent(event=event, column_index=index, columns_count=len(cluster))
        for cluster in clusters
        for index, event in enumerate(cluster)
    ]
    logger.debug(f"Laid out {len(positioned)} timed events in {len(clusters)} clusters")
    return positioned


def vertical_span(
    event: Event, hour_range: Optional[HourRange] = None
) -> Optional[tuple[float, float]]:
    """Vertical position of an event inside the rendered hours.

    Returns:
        (offset from range start, height), both in hours and clipped to the
        range, or None when the event lies entirely outside it
    """
    hour_range = hour_range or HourRange()
    start = event.start_minutes / 60
    end = _drawn_end_minutes(event) / 60

    if end <= hour_range.start_hour or start >= hour_range.end_hour:
        return None

    top = max(start, hour_range.start_hour)
    bottom = min(end, hour_range.end_hour)
    return top - hour_range.start_hour, bottom - top


def now_offset(
    reference: datetime, day: DateLike, hour_range: Optional[HourRange] = None
) -> Optional[float]:
    """Position of the current-time indicator, in hours from the range start.

    Args:
        reference: The instant to mark, usually the caller's current local time
        day: Day being drawn

    Returns:
        Offset in hours, or None when ``reference`` is on another day or
        outside the rendered hours
    """
    hour_range = hour_range or HourRange()
    if reference.date() != to_date(day):
        return None

    hours = reference.hour + reference.minute / 60 + reference.second / 3600
    if not hour_range.start_hour <= hours < hour_range.end_hour:
        return None
    return hours - hour_range.start_hour


@dataclass
class DayLayout:
    """Everything a day column needs: all-day strip and positioned timed events."""

    day: str
    all_day: list[Event] = field(default_factory=list)
    positioned: list[PositionedEvent] = field(default_factory=list)
    hour_range: HourRange = field(default_factory=HourRange)

    def visible(self) -> list[tuple[PositionedEvent, tuple[float, float]]]:
        """Positioned events inside the rendered hours with their vertical span."""
        result = []
        for item in self.positioned:
            span = vertical_span(item.event, self.hour_range)
            if span is not None:
                result.append((item, span))
        return result


def layout_day(
    events: Iterable[Event], day: DateLike, hour_range: Optional[HourRange] = None
) -> DayLayout:
    """Select the events active on ``day``, split off all-day ones, lay out the rest."""
    day_date = to_date(day)
    all_day, timed = split_all_day(events_for_date(events, day_date))
    return DayLayout(
        day=day_date.isoformat(),
        all_day=all_day,
        positioned=layout(timed),
        hour_range=hour_range or HourRange(),
    )


def layout_week(
    events: Iterable[Event],
    reference: DateLike,
    hour_range: Optional[HourRange] = None,
    week_starts_on: int = 0,
) -> list[DayLayout]:
    """Lay out the seven days of the week containing ``reference``."""
    events = list(events)
    return [
        layout_day(events, day, hour_range) for day in week_dates(reference, week_starts_on)
    ]
