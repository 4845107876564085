"""Shared fixtures for the agenda test suite."""

import logging
from typing import Any, Callable, Optional

import pytest

from agenda.config.settings import reset_settings
from agenda.events.models import Event, EventPatch, RecurrenceConfig
from agenda.store.base import IdOrFilter, as_filter


@pytest.fixture(autouse=True)
def _isolated_settings():
    """Drop any cached global settings between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for events with sensible defaults."""

    def _make(date: str = "2024-01-07", **overrides: Any) -> Event:
        data: dict[str, Any] = {
            "title": "Reunião de oração",
            "date": date,
            "start_time": "19:00",
            "end_time": "20:00",
            "organization_id": "org-1",
        }
        data.update(overrides)
        return Event(**data)

    return _make


@pytest.fixture
def weekly_rule() -> RecurrenceConfig:
    """Every two weeks, four occurrences in total."""
    return RecurrenceConfig(type="weekly", interval=2, end_type="after", end_after_occurrences=4)


class FakeEventStore:
    """In-memory EventStore that records every call it receives."""

    def __init__(self, events: Optional[list[Event]] = None):
        self.events: dict[str, Event] = {}
        self.calls: list[tuple[str, Any]] = []
        self._next_id = 1
        for event in events or []:
            self.events[event.id] = event

    def _new_id(self) -> str:
        while f"evt-{self._next_id}" in self.events:
            self._next_id += 1
        new_id = f"evt-{self._next_id}"
        self._next_id += 1
        return new_id

    def _matching(self, id_or_filter: IdOrFilter) -> list[Event]:
        event_filter = as_filter(id_or_filter)
        return [event for event in self.events.values() if event_filter.matches(event)]

    async def insert_events(self, events: list[Event]) -> list[str]:
        self.calls.append(("insert_events", list(events)))
        ids = []
        for event in events:
            event_id = event.id or self._new_id()
            self.events[event_id] = event.model_copy(update={"id": event_id})
            ids.append(event_id)
        return ids

    async def delete_events(self, id_or_filter: IdOrFilter) -> int:
        self.calls.append(("delete_events", id_or_filter))
        matched = self._matching(id_or_filter)
        for event in matched:
            del self.events[event.id]
        return len(matched)

    async def update_event(self, id_or_filter: IdOrFilter, patch: EventPatch) -> int:
        self.calls.append(("update_event", (id_or_filter, patch)))
        matched = self._matching(id_or_filter)
        for event in matched:
            self.events[event.id] = event.apply_patch(patch)
        return len(matched)

    async def get_event(self, event_id: str) -> Optional[Event]:
        self.calls.append(("get_event", event_id))
        return self.events.get(event_id)

    async def list_events(self, organization_id: Optional[str] = None) -> list[Event]:
        self.calls.append(("list_events", organization_id))
        return [
            event
            for event in self.events.values()
            if organization_id is None or event.organization_id == organization_id
        ]

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def children_of(self, root_id: str) -> list[Event]:
        return sorted(
            (e for e in self.events.values() if e.parent_event_id == root_id),
            key=lambda e: e.date,
        )


@pytest.fixture
def fake_store() -> FakeEventStore:
    """Empty in-memory event store."""
    return FakeEventStore()


@pytest.fixture
def quiet_agenda_logger():
    """Restore the agenda logger after tests that reconfigure it."""
    logger = logging.getLogger("agenda")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)
