"""SQLite event store built on aiosqlite."""

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Optional, Union

import aiosqlite

from ..events.models import Event, EventPatch
from .base import EventFilter, IdOrFilter, StoreError, as_filter

logger = logging.getLogger(__name__)

# Column order shared by INSERT and row decoding
_COLUMNS = (
    "id",
    "title",
    "date",
    "end_date",
    "start_time",
    "end_time",
    "is_all_day",
    "recurrence",
    "parent_event_id",
    "location",
    "visibility",
    "custom_color",
    "ministry_id",
    "responsible_id",
    "observations",
    "reminder",
    "organization_id",
    "collaborator_ministry_ids",
    "volunteer_ids",
)
_JSON_COLUMNS = ("recurrence", "collaborator_ministry_ids", "volunteer_ids")


def _event_to_row(event: Event, event_id: str) -> tuple[Any, ...]:
    data = event.model_dump()
    data["id"] = event_id
    data["is_all_day"] = int(event.is_all_day)
    for column in _JSON_COLUMNS:
        if data[column] is not None:
            data[column] = json.dumps(data[column])
    return tuple(data[column] for column in _COLUMNS)


def _row_to_event(row: aiosqlite.Row) -> Event:
    data = {column: row[column] for column in _COLUMNS}
    for column in _JSON_COLUMNS:
        if data[column] is not None:
            data[column] = json.loads(data[column])
    data["is_all_day"] = bool(data["is_all_day"])
    return Event.model_validate(data)


def _where_clause(event_filter: EventFilter) -> tuple[str, list[str]]:
    conditions = []
    params = []
    if event_filter.event_id is not None:
        conditions.append("id = ?")
        params.append(event_filter.event_id)
    if event_filter.parent_event_id is not None:
        conditions.append("parent_event_id = ?")
        params.append(event_filter.parent_event_id)
    return " AND ".join(conditions), params


class SQLiteEventStore:
    """Stores flat event records in a SQLite file.

    Each operation opens its own connection; the schema is created lazily on
    first use. Series membership is never stored as a grouping, only as the
    ``parent_event_id`` column, which is indexed for series-wide operations.
    """

    def __init__(self, database_path: Union[Path, str]):
        """Initialize the store.

        Args:
            database_path: Path to SQLite database file
        """
        self.database_path = (
            Path(database_path) if isinstance(database_path, str) else database_path
        )
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False
        self._initialization_lock: Optional[asyncio.Lock] = None

        logger.info(f"Event store initialized (lazy): {self.database_path}")

    @classmethod
    def from_settings(cls, settings: Any) -> "SQLiteEventStore":
        """Create a store at ``settings.database_file``."""
        return cls(settings.database_file)

    async def _ensure_initialized(self) -> None:
        """Create the schema once, before the first operation.

        Raises:
            StoreError: If the schema cannot be created
        """
        if self._initialized:
            return

        # Use a lock to prevent concurrent initialization
        if self._initialization_lock is None:
            self._initialization_lock = asyncio.Lock()

        async with self._initialization_lock:
            # Double-check after acquiring lock
            if self._initialized:
                return

            try:
                await self._initialize_database()
            except aiosqlite.Error as e:
                logger.exception("Failed to initialize event store")
                raise StoreError(f"Failed to initialize event store: {e}") from e
            self._initialized = True

    async def _initialize_database(self) -> None:
        async with aiosqlite.connect(str(self.database_path)) as db:
            await db.execute("PRAGMA journal_mode=WAL")
            await db.execute("PRAGMA synchronous=NORMAL")

            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS events (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL DEFAULT '',
                    date TEXT NOT NULL,
                    end_date TEXT,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    is_all_day INTEGER NOT NULL DEFAULT 0,
                    recurrence TEXT,
                    parent_event_id TEXT,
                    location TEXT,
                    visibility TEXT NOT NULL DEFAULT 'public',
                    custom_color TEXT,
                    ministry_id TEXT,
                    responsible_id TEXT,
                    observations TEXT,
                    reminder TEXT,
                    organization_id TEXT,
                    collaborator_ministry_ids TEXT,
                    volunteer_ids TEXT,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """
            )

            # Series-wide deletes and updates filter on the parent link
            await db.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_events_parent
                ON events(parent_event_id)
            """
            )

            await db.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_events_org_date
                ON events(organization_id, date)
            """
            )

            await db.commit()
            logger.debug(f"Event store schema ready at {self.database_path}")

    async def insert_events(self, events: list[Event]) -> list[str]:
        """Insert events, assigning ids to those without one.

        Args:
            events: Events to insert

        Returns:
            Ids of the inserted events, in input order

        Raises:
            StoreError: If the insert fails; nothing is written in that case
        """
        await self._ensure_initialized()

        if not events:
            logger.debug("No events to insert")
            return []

        ids = [event.id or uuid.uuid4().hex for event in events]
        placeholders = ", ".join("?" for _ in _COLUMNS)

        try:
            async with aiosqlite.connect(str(self.database_path)) as db:
                await db.executemany(
                    f"INSERT INTO events ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                    [_event_to_row(event, event_id) for event, event_id in zip(events, ids)],
                )
                await db.commit()
        except aiosqlite.Error as e:
            logger.exception("Failed to insert events")
            raise StoreError(f"Failed to insert {len(events)} events: {e}") from e

        logger.debug(f"Inserted {len(ids)} events")
        return ids

    async def delete_events(self, id_or_filter: IdOrFilter) -> int:
        """Delete events matching an id or filter.

        Returns:
            Number of deleted events
        """
        await self._ensure_initialized()
        where, params = _where_clause(as_filter(id_or_filter))

        try:
            async with aiosqlite.connect(str(self.database_path)) as db:
                cursor = await db.execute(f"DELETE FROM events WHERE {where}", params)
                await db.commit()
                deleted = cursor.rowcount
        except aiosqlite.Error as e:
            logger.exception(f"Failed to delete events ({id_or_filter})")
            raise StoreError(f"Failed to delete events: {e}") from e

        logger.debug(f"Deleted {deleted} events matching {id_or_filter}")
        return deleted

    async def update_event(self, id_or_filter: IdOrFilter, patch: EventPatch) -> int:
        """Apply a patch to every event matching an id or filter.

        Each matching record is re-validated with the patch applied, then
        written back in a single transaction.

        Returns:
            Number of updated events
        """
        await self._ensure_initialized()

        if patch.is_empty():
            return 0

        where, params = _where_clause(as_filter(id_or_filter))
        assignments = ", ".join(f"{column} = ?" for column in _COLUMNS[1:])

        try:
            async with aiosqlite.connect(str(self.database_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(f"SELECT * FROM events WHERE {where}", params)
                rows = await cursor.fetchall()

                updates = []
                for row in rows:
                    updated = _row_to_event(row).apply_patch(patch)
                    values = _event_to_row(updated, row["id"])
                    updates.append((*values[1:], row["id"]))

                await db.executemany(f"UPDATE events SET {assignments} WHERE id = ?", updates)
                await db.commit()
        except aiosqlite.Error as e:
            logger.exception(f"Failed to update events ({id_or_filter})")
            raise StoreError(f"Failed to update events: {e}") from e

        logger.debug(f"Updated {len(updates)} events matching {id_or_filter}")
        return len(updates)

    async def get_event(self, event_id: str) -> Optional[Event]:
        """Get event by ID.

        Returns:
            Event if found, None otherwise
        """
        await self._ensure_initialized()

        try:
            async with aiosqlite.connect(str(self.database_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute("SELECT * FROM events WHERE id = ?", (event_id,))
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.exception(f"Failed to get event by ID: {event_id}")
            raise StoreError(f"Failed to get event {event_id}: {e}") from e

        return _row_to_event(row) if row else None

    async def list_events(self, organization_id: Optional[str] = None) -> list[Event]:
        """List stored events ordered by date and start time.

        Args:
            organization_id: Only return events of this organization when given
        """
        await self._ensure_initialized()

        query = "SELECT * FROM events"
        params: list[str] = []
        if organization_id is not None:
            query += " WHERE organization_id = ?"
            params.append(organization_id)
        query += " ORDER BY date, start_time, rowid"

        try:
            async with aiosqlite.connect(str(self.database_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(query, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.exception("Failed to list events")
            raise StoreError(f"Failed to list events: {e}") from e

        return [_row_to_event(row) for row in rows]
