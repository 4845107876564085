"""Configuration management for the agenda core."""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, PrivateAttr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ENV_PREFIX = "AGENDA_"
ENV_NESTED_DELIMITER = "__"


class RecurrenceSettings(BaseModel):
    """Safety bounds applied while expanding recurrence rules."""

    max_iterations: int = Field(
        default=365, ge=1, description="Iteration ceiling for rules without an occurrence count"
    )
    never_horizon_months: int = Field(
        default=6, ge=1, description="Months after the base date at which 'never' rules stop"
    )


class LayoutSettings(BaseModel):
    """Rendered hour range of the day and week views."""

    day_start_hour: int = Field(default=6, ge=0, le=23, description="First rendered hour")
    day_end_hour: int = Field(default=24, ge=1, le=24, description="End of the last rendered hour")

    @model_validator(mode="after")
    def _check_range(self) -> "LayoutSettings":
        if self.day_end_hour <= self.day_start_hour:
            raise ValueError(
                f"day_end_hour ({self.day_end_hour}) must be after "
                f"day_start_hour ({self.day_start_hour})"
            )
        return self


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    # Console Logging
    console_level: str = Field(
        default="INFO",
        description="Console log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    console_colors: bool = Field(
        default=True, description="Enable colored console output (auto-detected)"
    )

    # File Logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_level: str = Field(default="DEBUG", description="File log level")
    file_directory: Optional[str] = Field(
        default=None, description="Custom log directory (defaults to data_dir/logs)"
    )
    file_prefix: str = Field(default="agenda", description="Log file prefix")
    max_log_files: int = Field(default=5, description="Maximum number of rotated files to keep")

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )


class AgendaSettings(BaseSettings):
    """Application settings with environment variable and YAML support.

    Precedence, highest first: explicit keyword arguments, ``AGENDA_*``
    environment variables (nested groups use ``AGENDA_RECURRENCE__MAX_ITERATIONS``
    style names), the YAML config file, then the defaults below.
    """

    _explicit_args: set = PrivateAttr(default_factory=set)
    _env_vars_set: set = PrivateAttr(default_factory=set)

    recurrence: RecurrenceSettings = Field(default_factory=RecurrenceSettings)
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Paths
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "agenda")
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local" / "share" / "agenda")
    database_name: str = Field(default="agenda.db", description="SQLite file name in data_dir")

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter=ENV_NESTED_DELIMITER,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs: Any) -> None:
        config_file = kwargs.pop("_config_file", None)

        env_vars_set = set()
        for key in os.environ:
            if key.upper().startswith(ENV_PREFIX):
                env_vars_set.add(key[len(ENV_PREFIX) :].lower())

        super().__init__(**kwargs)

        self._explicit_args = set(kwargs.keys())
        self._env_vars_set = env_vars_set

        self._load_yaml_config(Path(config_file) if config_file else None)

    def _find_config_file(self) -> Optional[Path]:
        """Find config file, checking project directory first, then user home."""
        project_root = Path(__file__).parent.parent.parent
        project_config = project_root / "config" / "config.yaml"
        if project_config.exists():
            return project_config

        user_config = self.config_dir / "config.yaml"
        if user_config.exists():
            return user_config

        return None

    def _is_overridden(self, setting: str, group: Optional[str] = None) -> bool:
        """Check if a setting was given explicitly or through the environment."""
        if group is None:
            return setting in self._explicit_args or setting in self._env_vars_set
        nested_env = f"{group}{ENV_NESTED_DELIMITER}{setting}"
        return (
            group in self._explicit_args
            or group in self._env_vars_set
            or nested_env in self._env_vars_set
        )

    def _load_group(self, config_data: dict, group: str) -> None:
        """Apply one nested settings group from YAML data."""
        group_config = config_data.get(group)
        if not isinstance(group_config, dict):
            return

        current = getattr(self, group)
        updates = {
            setting: value
            for setting, value in group_config.items()
            if setting in type(current).model_fields and not self._is_overridden(setting, group)
        }
        if updates:
            merged = {**current.model_dump(), **updates}
            setattr(self, group, type(current).model_validate(merged))

    def _load_basic_settings(self, config_data: dict) -> None:
        """Load top-level path settings from YAML data."""
        for setting in ("config_dir", "data_dir"):
            if setting in config_data and not self._is_overridden(setting):
                setattr(self, setting, Path(config_data[setting]).expanduser())
        if "database_name" in config_data and not self._is_overridden("database_name"):
            self.database_name = str(config_data["database_name"])

    def _load_yaml_config(self, config_file: Optional[Path] = None) -> None:
        """Load configuration from YAML file if it exists."""
        config_file = config_file or self._find_config_file()
        if not config_file or not config_file.exists():
            return

        try:
            with config_file.open() as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            # Fall back to defaults and environment values
            logger.warning(f"Could not load YAML config from {config_file}: {e}")
            return

        if not config_data:
            return

        self._load_basic_settings(config_data)
        for group in ("recurrence", "layout", "logging"):
            self._load_group(config_data, group)
        logger.debug(f"Loaded configuration from {config_file}")

    @property
    def database_file(self) -> Path:
        """Path to SQLite database file."""
        return self.data_dir / self.database_name

    @property
    def config_file(self) -> Path:
        """Path to the user YAML configuration file."""
        return self.config_dir / "config.yaml"


# Global settings management
_settings_instance: Optional[AgendaSettings] = None


def get_settings() -> AgendaSettings:
    """Get the global settings instance, creating it lazily if needed.

    Returns:
        AgendaSettings: The global settings instance
    """
    if globals()["_settings_instance"] is None:
        globals()["_settings_instance"] = AgendaSettings()
    return globals()["_settings_instance"]


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None
