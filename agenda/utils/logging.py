"""Logging configuration and setup utilities."""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ..config.settings import AgendaSettings

# Custom log level between INFO(20) and DEBUG(10)
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

ROOT_LOGGER_NAME = "agenda"


def verbose(self: logging.Logger, message: Any, *args: Any, **kwargs: Any) -> None:
    """Add verbose() method to Logger class for detailed diagnostic logging.

    VERBOSE (15) sits between DEBUG and INFO: operational detail such as
    silently applied expansion caps, without full debug noise.

    Example:
        >>> logger = logging.getLogger(__name__)
        >>> logger.verbose("Series capped at %d iterations", 365)
    """
    if self.isEnabledFor(VERBOSE):
        self._log(VERBOSE, message, args, **kwargs)


# Add verbose method to all Logger instances
logging.Logger.verbose = verbose  # type: ignore[attr-defined]


def get_log_level(level_name: str) -> int:
    """Get numeric log level from string name, including custom VERBOSE level.

    Args:
        level_name: Log level name (DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL),
            case insensitive

    Returns:
        Numeric log level value

    Raises:
        AttributeError: If level name is not recognized
    """
    level_name = level_name.upper()
    if level_name == "VERBOSE":
        return VERBOSE
    level: int = getattr(logging, level_name)
    return level


class AutoColoredFormatter(logging.Formatter):
    """Formatter that auto-detects terminal color support."""

    COLORS = {
        "ERROR": {"truecolor": "\033[91m", "basic": "\033[31m", "none": ""},
        "INFO": {"truecolor": "\033[94m", "basic": "\033[34m", "none": ""},
        "VERBOSE": {"truecolor": "\033[92m", "basic": "\033[32m", "none": ""},
        "WARNING": {"truecolor": "\033[93m", "basic": "\033[33m", "none": ""},
        "DEBUG": {"truecolor": "\033[95m", "basic": "\033[35m", "none": ""},
        "CRITICAL": {"truecolor": "\033[91m\033[1m", "basic": "\033[31m\033[1m", "none": ""},
        "RESET": {"truecolor": "\033[0m", "basic": "\033[0m", "none": ""},
    }

    def __init__(self, *args: Any, enable_colors: bool = True, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.enable_colors = enable_colors
        self.color_mode = self._detect_color_support() if enable_colors else "none"

    def _detect_color_support(self) -> str:
        """Auto-detect terminal color capabilities."""
        if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
            return "none"

        term = os.environ.get("TERM", "").lower()
        colorterm = os.environ.get("COLORTERM", "").lower()

        if term == "dumb":
            return "none"
        if colorterm in ("truecolor", "24bit") or "256color" in term:
            return "truecolor"
        if term and "color" in term:
            return "basic"
        return "none"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors if supported."""
        formatted = super().format(record)

        if self.color_mode == "none":
            return formatted

        level_name = record.levelname
        if level_name in self.COLORS:
            color_start = self.COLORS[level_name][self.color_mode]
            color_end = self.COLORS["RESET"][self.color_mode]
            formatted = formatted.replace(level_name, f"{color_start}{level_name}{color_end}", 1)

        return formatted


def setup_logging(
    settings: Optional["AgendaSettings"] = None,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Set up the ``agenda`` logger with console and optional file output.

    Explicit arguments win over the values in ``settings.logging``.

    Args:
        settings: Agenda settings providing logging defaults
        log_level: Console level name, VERBOSE included
        log_file: Optional log file name
        log_dir: Optional directory for the log file

    Returns:
        Configured ``agenda`` logger
    """
    logging_settings = getattr(settings, "logging", None)

    level_name = log_level or getattr(logging_settings, "console_level", "INFO")
    console_level = get_log_level(level_name)
    enable_colors = getattr(logging_settings, "console_colors", True)

    if log_file is None and logging_settings is not None and logging_settings.file_enabled:
        log_file = f"{logging_settings.file_prefix}.log"
        if log_dir is None:
            if logging_settings.file_directory:
                log_dir = Path(logging_settings.file_directory).expanduser()
            else:
                log_dir = settings.data_dir / "logs"  # type: ignore[union-attr]

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(min(console_level, logging.DEBUG if log_file else console_level))
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        AutoColoredFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
            enable_colors=enable_colors,
        )
    )
    logger.addHandler(console_handler)

    if log_file:
        if log_dir:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / log_file
        else:
            log_path = Path(log_file)

        file_level = get_log_level(getattr(logging_settings, "file_level", "DEBUG"))
        max_files = getattr(logging_settings, "max_log_files", 5)

        # Rotate to keep log files bounded
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=10 * 1024 * 1024, backupCount=max_files, encoding="utf-8"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
        logger.info(f"Logging to file: {log_path}")

    third_party_level = get_log_level(getattr(logging_settings, "third_party_level", "WARNING"))
    for lib in ["aiosqlite", "asyncio"]:
        logging.getLogger(lib).setLevel(third_party_level)

    logger.debug(f"Logging initialized at {level_name} level")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the ``agenda`` namespace.

    Example:
        >>> store_logger = get_logger("store.database")
        >>> store_logger.debug("Inserted %d events", 3)
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
