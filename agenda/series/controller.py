"""Edit and delete semantics for events that belong to a recurring series."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..events.exceptions import EventNotFoundError
from ..events.models import Event, EventPatch, RecurrenceConfig, RecurrenceType
from ..events.recurrence import RecurrenceExpander
from ..events.series import series_root_id
from ..events.validation import is_recurring_rule, normalize_recurrence, validate_recurrence
from ..store.base import EventFilter, EventStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fields that identify a record and are never changed by a patch
LINKAGE_FIELDS = ("id", "parent_event_id")

# Fields that stay per-occurrence or belong to the root alone
ROOT_ONLY_FIELDS = ("recurrence", "date", "end_date", *LINKAGE_FIELDS)


class MutationScope(str, Enum):
    """How far an edit or delete reaches."""

    OCCURRENCE = "occurrence"
    SERIES = "series"


@dataclass
class SeriesCreateResult:
    """Ids written by :meth:`SeriesMutationController.create_event`."""

    root_id: str
    instance_ids: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return 1 + len(self.instance_ids)


@dataclass
class SeriesUpdateResult:
    """Outcome of an update, with regeneration details when a rebuild ran."""

    root_id: str
    updated_count: int = 0
    regenerated: bool = False
    deleted_instances: int = 0
    instance_ids: list[str] = field(default_factory=list)


@dataclass
class _SeriesLock:
    """Lock for one series id plus the number of tasks holding or awaiting it."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class SeriesMutationController:
    """Applies occurrence-level and series-level mutations through an event store.

    Mutations that go through the same series id are serialized with a
    per-series lock. A regeneration runs as a shielded task so a cancelled
    caller cannot leave a series with its children deleted and not rebuilt.
    Store errors propagate unchanged and nothing is retried; a failed
    regeneration is repaired by running it again.
    """

    def __init__(
        self,
        store: EventStore,
        expander: Optional[RecurrenceExpander] = None,
        settings: Any = None,
    ):
        """Initialize the controller.

        Args:
            store: Event store to mutate
            expander: Recurrence expander, built from ``settings`` when omitted
            settings: Agenda settings for the default expander
        """
        self.store = store
        self.expander = expander or RecurrenceExpander(settings)
        self._series_locks: dict[str, _SeriesLock] = {}

    @asynccontextmanager
    async def _series_lock(self, series_id: str) -> AsyncIterator[None]:
        """Hold the lock for ``series_id``, dropping it once nobody holds or awaits it."""
        entry = self._series_locks.get(series_id)
        if entry is None:
            entry = self._series_locks[series_id] = _SeriesLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                del self._series_locks[series_id]

    async def _locked(
        self, series_id: str, operation: Callable[..., Awaitable[T]], *args: Any
    ) -> T:
        async with self._series_lock(series_id):
            return await operation(*args)

    # Occurrence-level operations

    async def delete_one(self, event_id: str) -> int:
        """Delete exactly one event record.

        Deleting a root this way leaves its children in place, still pointing
        at the removed id.

        Returns:
            Number of deleted records (0 or 1)
        """
        return await self._locked(event_id, self._delete_one, event_id)

    async def _delete_one(self, event_id: str) -> int:
        deleted = await self.store.delete_events(event_id)
        logger.debug(f"Deleted single event {event_id} ({deleted} record)")
        return deleted

    async def update_one(self, event_id: str, patch: EventPatch) -> int:
        """Update exactly one event record.

        ``recurrence`` and the linkage fields are stripped from the patch, so
        an occurrence edit can never change a rule or move a record between
        series. A patch left empty issues no store call.

        Returns:
            Number of updated records
        """
        return await self._locked(event_id, self._update_one, event_id, patch)

    async def _update_one(self, event_id: str, patch: EventPatch) -> int:
        occurrence_patch = patch.without("recurrence", *LINKAGE_FIELDS)
        if occurrence_patch.is_empty():
            logger.debug(f"Nothing to update on event {event_id}")
            return 0
        return await self.store.update_event(event_id, occurrence_patch)

    # Series-level operations

    async def delete_series(self, root_id: str) -> int:
        """Delete a root and every instance generated from it.

        Children go first, so a failure between the two calls never leaves
        instances whose root has already vanished.

        Returns:
            Total number of deleted records
        """
        return await self._locked(root_id, self._delete_series, root_id)

    async def _delete_series(self, root_id: str) -> int:
        children = await self.store.delete_events(EventFilter(parent_event_id=root_id))
        root = await self.store.delete_events(root_id)
        logger.info(f"Deleted series {root_id}: {root} root, {children} instances")
        return children + root

    async def update_series(
        self, root_id: str, patch: EventPatch, regenerate: bool = False
    ) -> SeriesUpdateResult:
        """Update a root and propagate the shared fields to its instances.

        The root receives the whole patch. Instances receive everything except
        the recurrence rule, their own dates and the linkage fields. A weekday
        rule is pinned to the root's weekday before it is stored.

        With ``regenerate`` and a repeating ``patch.recurrence``, the series is
        rebuilt: the rule is validated before anything is written, the updated
        root is re-read, every instance is deleted and the expander output for
        the new rule is inserted. The rebuild is destructive; per-instance
        edits are lost.

        Args:
            root_id: Id of the series root
            patch: Fields to change
            regenerate: Rebuild the instances from the patched rule

        Returns:
            SeriesUpdateResult describing what was written

        Raises:
            RecurrenceValidationError: If a rebuild was requested with an invalid rule
            EventNotFoundError: If the root is missing when re-read for a rebuild
        """
        rebuild = regenerate and is_recurring_rule(patch.recurrence)
        if rebuild:
            validate_recurrence(patch.recurrence)  # type: ignore[arg-type]
            return await asyncio.shield(
                self._locked(root_id, self._update_series, root_id, patch, True)
            )
        return await self._locked(root_id, self._update_series, root_id, patch, False)

    async def _update_series(
        self, root_id: str, patch: EventPatch, rebuild: bool
    ) -> SeriesUpdateResult:
        result = SeriesUpdateResult(root_id=root_id)
        patch = await self._normalize_patch(root_id, patch)

        root_patch = patch.without(*LINKAGE_FIELDS)
        if not root_patch.is_empty():
            result.updated_count += await self.store.update_event(root_id, root_patch)

        shared_patch = patch.without(*ROOT_ONLY_FIELDS)
        if not shared_patch.is_empty():
            result.updated_count += await self.store.update_event(
                EventFilter(parent_event_id=root_id), shared_patch
            )

        if rebuild:
            result.deleted_instances, result.instance_ids = await self._regenerate(root_id)
            result.regenerated = True

        logger.info(
            f"Updated series {root_id}: {result.updated_count} records"
            + (f", rebuilt {len(result.instance_ids)} instances" if rebuild else "")
        )
        return result

    async def _normalize_patch(self, root_id: str, patch: EventPatch) -> EventPatch:
        """Pin a weekday rule in the patch to the root's (possibly patched) date."""
        rule = patch.recurrence
        if rule is None or rule.type != RecurrenceType.WEEKDAY:
            return patch

        base_date = patch.date
        if base_date is None:
            root = await self.store.get_event(root_id)
            if root is None:
                return patch
            base_date = root.date

        changes = patch.changes()
        changes["recurrence"] = normalize_recurrence(rule, base_date)
        return EventPatch.model_validate(changes)

    async def _regenerate(self, root_id: str) -> tuple[int, list[str]]:
        root = await self.store.get_event(root_id)
        if root is None:
            raise EventNotFoundError(root_id)

        deleted = await self.store.delete_events(EventFilter(parent_event_id=root_id))
        rule = root.recurrence
        if rule is None or not rule.is_recurring:
            return deleted, []

        instances = self.expander.expand(root, rule, parent_id=root_id)
        instance_ids = await self.store.insert_events(instances) if instances else []
        logger.debug(
            f"Regenerated series {root_id}: removed {deleted}, inserted {len(instance_ids)}"
        )
        return deleted, instance_ids

    async def create_event(self, event: Event) -> SeriesCreateResult:
        """Insert a new event and, when it repeats, its generated instances.

        A weekday rule is stored normalized to the event's own weekday.

        Raises:
            RecurrenceValidationError: If the rule is invalid; nothing is written
        """
        if not event.is_recurring_root:
            root_id = (await self.store.insert_events([event]))[0]
            logger.debug(f"Created single event {root_id}")
            return SeriesCreateResult(root_id=root_id)

        rule = validate_recurrence(event.recurrence)  # type: ignore[arg-type]
        rule = normalize_recurrence(rule, event.date)
        event = event.model_copy(update={"recurrence": rule})
        return await asyncio.shield(self._create_series(event, rule))

    async def _create_series(self, event: Event, rule: RecurrenceConfig) -> SeriesCreateResult:
        root_id = (await self.store.insert_events([event]))[0]
        root = event.model_copy(update={"id": root_id})
        instances = self.expander.expand(root, rule, parent_id=root_id)
        instance_ids = await self.store.insert_events(instances) if instances else []
        logger.info(f"Created series {root_id} with {len(instance_ids)} instances")
        return SeriesCreateResult(root_id=root_id, instance_ids=instance_ids)

    # Scope dispatch

    async def delete(self, event: Event, scope: MutationScope) -> int:
        """Delete an event or its whole series, depending on ``scope``.

        Raises:
            ValueError: If the event has neither an id nor a parent
        """
        root_id = series_root_id(event)
        if MutationScope(scope) == MutationScope.SERIES:
            return await self.delete_series(root_id)
        if event.id is None:
            raise ValueError("Cannot delete an occurrence that has no id")
        return await self._locked(root_id, self._delete_one, event.id)

    async def update(
        self,
        event: Event,
        patch: EventPatch,
        scope: MutationScope,
        regenerate: bool = False,
    ) -> SeriesUpdateResult:
        """Update an event or its whole series, depending on ``scope``.

        ``regenerate`` only applies to the series scope.
        """
        root_id = series_root_id(event)
        if MutationScope(scope) == MutationScope.SERIES:
            return await self.update_series(root_id, patch, regenerate=regenerate)
        if event.id is None:
            raise ValueError("Cannot update an occurrence that has no id")
        updated = await self._locked(root_id, self._update_one, event.id, patch)
        return SeriesUpdateResult(root_id=root_id, updated_count=updated)
