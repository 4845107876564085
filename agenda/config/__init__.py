"""Configuration management for the agenda core."""

from .settings import (
    AgendaSettings,
    LayoutSettings,
    LoggingSettings,
    RecurrenceSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "AgendaSettings",
    "LayoutSettings",
    "LoggingSettings",
    "RecurrenceSettings",
    "get_settings",
    "reset_settings",
]
