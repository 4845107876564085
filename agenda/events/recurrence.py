"""Recurrence expansion into materialized event instances."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..dates import (
    DateUnit,
    add_period,
    anchor,
    end_of_day,
    format_local_date,
    parse_local_date,
    to_date,
)
from ..utils.logging import VERBOSE
from .exceptions import RecurrenceValidationError
from .models import Event, RecurrenceConfig, RecurrenceEndType, RecurrenceType

logger = logging.getLogger(__name__)

_STEP_UNITS = {
    RecurrenceType.DAILY: DateUnit.DAYS,
    RecurrenceType.WEEKLY: DateUnit.WEEKS,
    RecurrenceType.WEEKDAY: DateUnit.WEEKS,
    RecurrenceType.MONTHLY: DateUnit.MONTHS,
    RecurrenceType.YEARLY: DateUnit.YEARS,
}


@dataclass
class ExpanderConfig:
    """Safety bounds for recurrence expansion.

    Consolidates the recurrence settings with explicit defaults.
    """

    # Hard ceiling on iterations for rules without an occurrence count
    max_iterations: int = 365
    # "never" rules stop this many months after the base date
    never_horizon_months: int = 6

    @classmethod
    def from_settings(cls, settings: Any) -> "ExpanderConfig":
        """Extract expansion bounds from a settings object.

        Args:
            settings: Object with a ``recurrence`` group, or None for defaults

        Returns:
            ExpanderConfig with values from settings or defaults
        """
        recurrence = getattr(settings, "recurrence", None)
        return cls(
            max_iterations=getattr(recurrence, "max_iterations", 365),
            never_horizon_months=getattr(recurrence, "never_horizon_months", 6),
        )


class RecurrenceExpander:
    """Turns a root event and its rule into a list of concrete child events.

    Instances are full event records meant to be persisted, not virtual
    occurrences. Every instance is a copy of the base event on a later date,
    with the rule stripped so recurrence stays a property of the root only.
    """

    def __init__(self, settings: Any = None):
        """Initialize RecurrenceExpander with settings.

        Args:
            settings: Agenda settings; defaults are used when omitted
        """
        self.settings = settings
        self.config = ExpanderConfig.from_settings(settings)

    def expand(
        self,
        base_event: Event,
        recurrence: RecurrenceConfig,
        parent_id: Optional[str] = None,
    ) -> list[Event]:
        """Expand a rule into the instances that follow the base occurrence.

        The base occurrence itself is never part of the output: a rule ending
        after N occurrences yields N - 1 instances.

        Args:
            base_event: Root event whose date anchors the series
            recurrence: Rule to expand, already validated by the caller
            parent_id: Root id to link the instances to, when known

        Returns:
            Instances in ascending date order

        Raises:
            RecurrenceValidationError: If the effective interval is not positive
        """
        rule_type = RecurrenceType(recurrence.type)
        if rule_type == RecurrenceType.NONE:
            logger.debug("Rule type 'none' for event %s, nothing to expand", base_event.id)
            return []

        interval = recurrence.effective_interval
        if interval <= 0:
            raise RecurrenceValidationError(f"interval must be a positive integer, got {interval}")

        start = parse_local_date(base_event.date)
        end_type = RecurrenceEndType(recurrence.end_type)
        ceiling = self._iteration_ceiling(recurrence, end_type)
        end_bound = self._end_bound(recurrence, end_type)
        horizon = self._horizon(start, end_type)
        unit = _STEP_UNITS[rule_type]

        instances: list[Event] = []
        hit_ceiling = True
        for i in range(1, ceiling):
            candidate = anchor(add_period(start, unit, i * interval))

            if end_bound is not None and candidate > end_bound:
                hit_ceiling = False
                break
            if horizon is not None and candidate > horizon:
                logger.log(
                    VERBOSE,
                    "Open-ended series from %s capped at %d months",
                    base_event.date,
                    self.config.never_horizon_months,
                )
                hit_ceiling = False
                break

            instances.append(self._derive_instance(base_event, candidate, parent_id))

        if hit_ceiling and end_type != RecurrenceEndType.AFTER:
            logger.log(
                VERBOSE,
                "Series from %s capped at %d iterations",
                base_event.date,
                self.config.max_iterations,
            )

        logger.debug(
            "Expanded %s rule (interval=%d, end=%s) from %s into %d instances",
            rule_type.value,
            interval,
            end_type.value,
            base_event.date,
            len(instances),
        )
        return instances

    def _iteration_ceiling(self, recurrence: RecurrenceConfig, end_type: RecurrenceEndType) -> int:
        if end_type != RecurrenceEndType.AFTER:
            return self.config.max_iterations
        if recurrence.end_after_occurrences is None:
            raise RecurrenceValidationError(
                "endAfterOccurrences is required when endType is 'after'"
            )
        return recurrence.end_after_occurrences

    def _end_bound(
        self, recurrence: RecurrenceConfig, end_type: RecurrenceEndType
    ) -> Optional[datetime]:
        if end_type == RecurrenceEndType.ON and recurrence.end_on_date:
            return end_of_day(recurrence.end_on_date)
        return None

    def _horizon(self, start: datetime, end_type: RecurrenceEndType) -> Optional[datetime]:
        if end_type == RecurrenceEndType.NEVER:
            return add_period(start, DateUnit.MONTHS, self.config.never_horizon_months)
        return None

    def _derive_instance(
        self, base_event: Event, occurrence: datetime, parent_id: Optional[str]
    ) -> Event:
        """Copy the base event onto an occurrence date.

        A multi-day base window keeps its length: ``end_date`` moves by the
        same number of days as ``date``. Instances are therefore not reduced
        to single-day events; copying ``end_date`` verbatim would put it
        before the shifted ``date``.
        """
        updates: dict[str, Any] = {
            "id": None,
            "date": format_local_date(occurrence),
            "recurrence": None,
        }
        if parent_id is not None:
            updates["parent_event_id"] = parent_id
        if base_event.end_date is not None:
            span = to_date(base_event.end_date) - to_date(base_event.date)
            updates["end_date"] = format_local_date(occurrence.date() + span)

        return base_event.model_copy(update=updates, deep=True)


def expand(
    base_event: Event,
    recurrence: RecurrenceConfig,
    parent_id: Optional[str] = None,
    settings: Any = None,
) -> list[Event]:
    """Expand a rule with default or given settings; see :meth:`RecurrenceExpander.expand`."""
    return RecurrenceExpander(settings).expand(base_event, recurrence, parent_id)
