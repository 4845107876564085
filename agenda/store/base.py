"""Persistence boundary used by the series controller."""

from dataclasses import dataclass
from typing import Optional, Protocol, Union, runtime_checkable

from ..events.models import Event, EventPatch
from ..utils.exceptions import AgendaError


class StoreError(AgendaError):
    """Raised when the backing store fails to read or write events."""


@dataclass(frozen=True)
class EventFilter:
    """Selects events by id or by series parent.

    At least one criterion must be set; an empty filter would match every
    stored event.
    """

    event_id: Optional[str] = None
    parent_event_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.event_id is None and self.parent_event_id is None:
            raise ValueError("EventFilter needs event_id or parent_event_id")

    def matches(self, event: Event) -> bool:
        """Check if an event satisfies every criterion that is set."""
        if self.event_id is not None and event.id != self.event_id:
            return False
        if self.parent_event_id is not None and event.parent_event_id != self.parent_event_id:
            return False
        return True


IdOrFilter = Union[str, EventFilter]


def as_filter(id_or_filter: IdOrFilter) -> EventFilter:
    """Turn a bare event id into an :class:`EventFilter`."""
    if isinstance(id_or_filter, EventFilter):
        return id_or_filter
    return EventFilter(event_id=id_or_filter)


@runtime_checkable
class EventStore(Protocol):
    """Async store of flat event records.

    Implementations assign ids on insert and report how many records each
    delete or update touched. Failures surface as :class:`StoreError`.
    """

    async def insert_events(self, events: list[Event]) -> list[str]:
        """Insert events and return their ids in input order."""
        ...

    async def delete_events(self, id_or_filter: IdOrFilter) -> int:
        """Delete matching events and return the number removed."""
        ...

    async def update_event(self, id_or_filter: IdOrFilter, patch: EventPatch) -> int:
        """Apply a patch to matching events and return the number changed."""
        ...

    async def get_event(self, event_id: str) -> Optional[Event]:
        """Fetch one event, or None when it does not exist."""
        ...

    async def list_events(self, organization_id: Optional[str] = None) -> list[Event]:
        """List events, optionally restricted to one organization."""
        ...
