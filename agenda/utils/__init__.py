"""Utility functions and helpers package."""

from .exceptions import AgendaError
from .logging import VERBOSE, get_log_level, get_logger, setup_logging

__all__ = [
    "VERBOSE",
    "AgendaError",
    "get_log_level",
    "get_logger",
    "setup_logging",
]
