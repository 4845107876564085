"""Event persistence."""

from .base import EventFilter, EventStore, StoreError, as_filter
from .database import SQLiteEventStore

__all__ = ["EventFilter", "EventStore", "SQLiteEventStore", "StoreError", "as_filter"]
