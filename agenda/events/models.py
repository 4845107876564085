"""Data models for agenda events and recurrence rules."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..dates import format_local_date, parse_time_to_minutes

ALL_DAY_START = "00:00"
ALL_DAY_END = "23:59"


class RecurrenceType(str, Enum):
    """Supported repetition rules."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    WEEKDAY = "weekday"  # every week on the base date's weekday


class RecurrenceEndType(str, Enum):
    """How a recurrence terminates."""

    NEVER = "never"
    AFTER = "after"
    ON = "on"


class Visibility(str, Enum):
    """Event visibility values."""

    PUBLIC = "public"
    PRIVATE = "private"


class RecurrenceConfig(BaseModel):
    """Recurrence rule attached to a root event.

    Values are kept as received; :func:`agenda.events.validation.validate_recurrence`
    is responsible for rejecting bad rules before they reach the expander.
    """

    type: RecurrenceType = Field(default=RecurrenceType.NONE, description="Repetition rule")
    interval: int = Field(default=1, description="Step multiplier, ignored for weekday rules")
    end_type: RecurrenceEndType = Field(
        default=RecurrenceEndType.NEVER, alias="endType", description="Termination mode"
    )
    end_after_occurrences: Optional[int] = Field(
        default=None,
        alias="endAfterOccurrences",
        description="Total occurrences including the base event (end_type=after)",
    )
    end_on_date: Optional[str] = Field(
        default=None, alias="endOnDate", description="Inclusive last date (end_type=on)"
    )
    weekday: Optional[int] = Field(
        default=None, description="Pinned weekday for weekday rules, 0=Sunday ... 6=Saturday"
    )

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    @property
    def is_recurring(self) -> bool:
        """Check if the rule generates a series at all."""
        return self.type != RecurrenceType.NONE

    @property
    def effective_interval(self) -> int:
        """Interval actually used for stepping; weekday rules always step by one week."""
        if self.type == RecurrenceType.WEEKDAY:
            return 1
        return self.interval


def _normalize_date(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return format_local_date(value.strip())
    return format_local_date(value)


def _normalize_time(value: Any) -> Any:
    if isinstance(value, str):
        minutes = parse_time_to_minutes(value)
        return f"{minutes // 60:02d}:{minutes % 60:02d}"
    return value


class Event(BaseModel):
    """The atomic schedulable unit.

    A root event owns ``recurrence``; a generated instance points back at its
    root through ``parent_event_id`` and never carries a rule of its own.
    """

    # Identity
    id: Optional[str] = Field(default=None, description="Opaque id, assigned by the store")
    title: str = Field(default="", description="Event title")

    # Time information
    date: str = Field(..., description="Calendar date, YYYY-MM-DD")
    end_date: Optional[str] = Field(
        default=None, alias="endDate", description="Inclusive end of a multi-day window"
    )
    start_time: str = Field(default=ALL_DAY_START, alias="startTime", description="HH:MM")
    end_time: str = Field(default=ALL_DAY_END, alias="endTime", description="HH:MM")
    is_all_day: bool = Field(default=False, alias="isAllDay", description="All-day flag")

    # Series linkage
    recurrence: Optional[RecurrenceConfig] = Field(
        default=None, description="Rule, present only on a series root"
    )
    parent_event_id: Optional[str] = Field(
        default=None, alias="parentEventId", description="Root id, present only on instances"
    )

    # Descriptive fields, carried through untouched
    location: Optional[str] = None
    visibility: Visibility = Visibility.PUBLIC
    custom_color: Optional[str] = Field(default=None, alias="customColor")
    ministry_id: Optional[str] = Field(default=None, alias="ministryId")
    responsible_id: Optional[str] = Field(default=None, alias="responsibleId")
    observations: Optional[str] = None
    reminder: Optional[str] = None
    organization_id: Optional[str] = Field(default=None, alias="organizationId")
    collaborator_ministry_ids: list[str] = Field(
        default_factory=list, alias="collaboratorMinistryIds"
    )
    volunteer_ids: list[str] = Field(default_factory=list, alias="volunteerIds")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    @field_validator("date", mode="before")
    @classmethod
    def _validate_date(cls, value: Any) -> Any:
        normalized = _normalize_date(value)
        if normalized is None:
            raise ValueError("date is required")
        return normalized

    @field_validator("end_date", mode="before")
    @classmethod
    def _validate_end_date(cls, value: Any) -> Any:
        return _normalize_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _validate_time(cls, value: Any) -> Any:
        return _normalize_time(value)

    @model_validator(mode="after")
    def _normalize(self) -> "Event":
        if self.is_all_day:
            self.start_time = ALL_DAY_START
            self.end_time = ALL_DAY_END
        if self.end_date is not None and self.end_date < self.date:
            raise ValueError(f"endDate {self.end_date} is before date {self.date}")
        return self

    @property
    def is_recurring_root(self) -> bool:
        """Check if this event carries a rule that generates a series."""
        return self.recurrence is not None and self.recurrence.is_recurring

    @property
    def start_minutes(self) -> int:
        """Start time in minutes since midnight."""
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        """End time in minutes since midnight."""
        return parse_time_to_minutes(self.end_time)

    def apply_patch(self, patch: "EventPatch") -> "Event":
        """Return a re-validated copy with the patch's explicitly set fields applied."""
        data = self.model_dump()
        data.update(patch.model_dump(exclude_unset=True))
        return Event.model_validate(data)

    def to_wire(self) -> dict[str, Any]:
        """Serialize using the camelCase boundary names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class EventPatch(BaseModel):
    """Partial update for an event; only explicitly set fields are applied."""

    id: Optional[str] = None
    title: Optional[str] = None
    date: Optional[str] = None
    end_date: Optional[str] = Field(default=None, alias="endDate")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    is_all_day: Optional[bool] = Field(default=None, alias="isAllDay")
    recurrence: Optional[RecurrenceConfig] = None
    parent_event_id: Optional[str] = Field(default=None, alias="parentEventId")
    location: Optional[str] = None
    visibility: Optional[Visibility] = None
    custom_color: Optional[str] = Field(default=None, alias="customColor")
    ministry_id: Optional[str] = Field(default=None, alias="ministryId")
    responsible_id: Optional[str] = Field(default=None, alias="responsibleId")
    observations: Optional[str] = None
    reminder: Optional[str] = None
    organization_id: Optional[str] = Field(default=None, alias="organizationId")
    collaborator_ministry_ids: Optional[list[str]] = Field(
        default=None, alias="collaboratorMinistryIds"
    )
    volunteer_ids: Optional[list[str]] = Field(default=None, alias="volunteerIds")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    @field_validator("date", "end_date", mode="before")
    @classmethod
    def _validate_dates(cls, value: Any) -> Any:
        return _normalize_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _validate_time(cls, value: Any) -> Any:
        return _normalize_time(value)

    def changes(self) -> dict[str, Any]:
        """Explicitly set fields as a plain dict keyed by attribute name."""
        return self.model_dump(exclude_unset=True)

    def without(self, *fields: str) -> "EventPatch":
        """Return a copy of this patch with the named fields unset."""
        data = {key: value for key, value in self.changes().items() if key not in fields}
        return EventPatch.model_validate(data)

    def is_empty(self) -> bool:
        """Check if the patch would change nothing."""
        return not self.model_fields_set
