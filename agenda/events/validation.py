"""Caller-side validation of recurrence rules.

The expander trusts its input; everything that can make a rule meaningless is
rejected here, before any expansion or store write happens.
"""

import logging
from typing import Optional

from ..dates import InvalidDateError, parse_local_date
from .exceptions import RecurrenceValidationError
from .models import RecurrenceConfig, RecurrenceEndType, RecurrenceType

logger = logging.getLogger(__name__)

MIN_AFTER_OCCURRENCES = 2


def is_recurring_rule(rule: Optional[RecurrenceConfig]) -> bool:
    """Check if a rule is present and actually repeats."""
    return rule is not None and rule.type != RecurrenceType.NONE


def validate_recurrence(rule: RecurrenceConfig) -> RecurrenceConfig:
    """Validate a recurrence rule before it is expanded or stored.

    Args:
        rule: Rule to check

    Returns:
        The same rule, for chaining

    Raises:
        RecurrenceValidationError: With every problem found
    """
    problems: list[str] = []

    if rule.type != RecurrenceType.WEEKDAY and rule.interval <= 0:
        problems.append(f"interval must be a positive integer, got {rule.interval}")

    if rule.end_type == RecurrenceEndType.AFTER:
        if rule.end_after_occurrences is None:
            problems.append("endAfterOccurrences is required when endType is 'after'")
        elif rule.end_after_occurrences < MIN_AFTER_OCCURRENCES:
            problems.append(
                f"endAfterOccurrences must be at least {MIN_AFTER_OCCURRENCES}, "
                f"got {rule.end_after_occurrences}"
            )

    if rule.end_type == RecurrenceEndType.ON:
        if not rule.end_on_date:
            problems.append("endOnDate is required when endType is 'on'")
        else:
            try:
                parse_local_date(rule.end_on_date)
            except InvalidDateError as e:
                problems.append(str(e))

    if rule.weekday is not None and not 0 <= rule.weekday <= 6:
        problems.append(f"weekday must be between 0 and 6, got {rule.weekday}")

    if problems:
        logger.debug("Rejected recurrence rule %s: %s", rule.model_dump(), problems)
        raise RecurrenceValidationError("; ".join(problems), problems)

    return rule


def normalize_recurrence(rule: RecurrenceConfig, base_date: str) -> RecurrenceConfig:
    """Pin a weekday rule to the base date's weekday and force its interval to one.

    Other rule types are returned unchanged.
    """
    if rule.type != RecurrenceType.WEEKDAY:
        return rule

    base = parse_local_date(base_date)
    # Views number weekdays from Sunday = 0
    weekday = (base.weekday() + 1) % 7
    return rule.model_copy(update={"interval": 1, "weekday": weekday})
