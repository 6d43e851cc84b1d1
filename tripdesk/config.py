"""
Configuration and logging setup for tripdesk.

Settings come from an optional YAML file:

    calendar:
      week_start: sunday
      compact_limit: 2
    alerts:
      international_band: [120, 180]
      domestic_band: [90, 120]
      international_keyword: international
      flight_subtypes: [Flight]
      default_duration_minutes: 60
      tight_transition_minutes: 60
      poll_interval_seconds: 60
    dashboard:
      upcoming_days: 7
      upcoming_limit: 3
    logging:
      level: INFO
    sources:
      snapshot: data/snapshot.json

Every key is optional; anything left out keeps its default.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml

from .engine.alerts import AlertConfig
from .engine.windower import DEFAULT_WEEK_START, weekday_from_name
from .errors import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "tripdesk.yaml"

LOG_FORMAT = '%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


@dataclass
class CalendarSettings:
    """Calendar grid settings."""
    week_start: int = DEFAULT_WEEK_START
    compact_limit: int = 2


@dataclass
class DashboardSettings:
    """Dashboard summary settings."""
    upcoming_days: int = 7
    upcoming_limit: int = 3


@dataclass
class TripDeskConfig:
    """Top-level configuration."""
    calendar: CalendarSettings = field(default_factory=CalendarSettings)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    dashboard: DashboardSettings = field(default_factory=DashboardSettings)
    log_level: str = "INFO"
    snapshot_path: Optional[Path] = None

    def validate(self) -> None:
        """Raise ConfigError on inconsistent values."""
        self.alerts.validate()
        if self.calendar.compact_limit < 0:
            raise ConfigError("calendar.compact_limit must not be negative")
        if self.dashboard.upcoming_days < 0:
            raise ConfigError("dashboard.upcoming_days must not be negative")
        if self.dashboard.upcoming_limit < 0:
            raise ConfigError("dashboard.upcoming_limit must not be negative")
        if not isinstance(getattr(logging, self.log_level.upper(), None), int):
            raise ConfigError(f"logging.level is not a logging level: {self.log_level!r}")


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return value


def _band(value: Any, name: str) -> tuple:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ConfigError(f"alerts.{name} must be a two-item list, got {value!r}")
    try:
        return int(value[0]), int(value[1])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"alerts.{name} must hold whole minutes, got {value!r}") from e


def _int(section: Dict[str, Any], key: str, default: int, prefix: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool):
        raise ConfigError(f"{prefix}.{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{prefix}.{key} must be an integer, got {value!r}") from e


def config_from_dict(data: Optional[Dict[str, Any]]) -> TripDeskConfig:
    """Build a validated configuration from parsed YAML."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at the top level")

    known = {"calendar", "alerts", "dashboard", "logging", "sources"}
    for key in sorted(set(data) - known):
        logger.warning(f"Ignoring unknown config section: {key}")

    calendar_data = _section(data, "calendar")
    alerts_data = _section(data, "alerts")
    dashboard_data = _section(data, "dashboard")
    logging_data = _section(data, "logging")
    sources_data = _section(data, "sources")

    try:
        week_start = weekday_from_name(calendar_data.get("week_start", DEFAULT_WEEK_START))
    except ValueError as e:
        raise ConfigError(f"calendar.week_start: {e}") from e

    defaults = AlertConfig()
    subtypes = alerts_data.get("flight_subtypes", list(defaults.flight_subtypes))
    if isinstance(subtypes, str):
        subtypes = [subtypes]
    alerts = AlertConfig(
        international_band=_band(alerts_data.get("international_band", defaults.international_band), "international_band"),
        domestic_band=_band(alerts_data.get("domestic_band", defaults.domestic_band), "domestic_band"),
        international_keyword=str(alerts_data.get("international_keyword", defaults.international_keyword)),
        flight_subtypes=tuple(str(s) for s in subtypes),
        default_duration_minutes=_int(alerts_data, "default_duration_minutes", defaults.default_duration_minutes, "alerts"),
        tight_transition_minutes=_int(alerts_data, "tight_transition_minutes", defaults.tight_transition_minutes, "alerts"),
        poll_interval_seconds=_int(alerts_data, "poll_interval_seconds", defaults.poll_interval_seconds, "alerts"),
    )

    snapshot = sources_data.get("snapshot")
    config = TripDeskConfig(
        calendar=CalendarSettings(
            week_start=week_start,
            compact_limit=_int(calendar_data, "compact_limit", 2, "calendar"),
        ),
        alerts=alerts,
        dashboard=DashboardSettings(
            upcoming_days=_int(dashboard_data, "upcoming_days", 7, "dashboard"),
            upcoming_limit=_int(dashboard_data, "upcoming_limit", 3, "dashboard"),
        ),
        log_level=str(logging_data.get("level", "INFO")),
        snapshot_path=Path(snapshot) if snapshot else None,
    )
    config.validate()
    return config


def load_config(path: Optional[Union[str, Path]] = None) -> TripDeskConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Explicit config path. When omitted, ``tripdesk.yaml`` in the
            working directory is used if present, otherwise defaults.

    Raises:
        ConfigError: If an explicit path is missing or the file is invalid
    """
    if path is None:
        config_file = Path(DEFAULT_CONFIG_FILE)
        if not config_file.exists():
            return config_from_dict({})
    else:
        config_file = Path(path)
        if not config_file.exists():
            raise ConfigError(f"Config file not found: {config_file}")

    try:
        with open(config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_file}: {e}") from e

    config = config_from_dict(data)
    if config.snapshot_path is not None and not config.snapshot_path.is_absolute():
        config.snapshot_path = config_file.parent / config.snapshot_path
    logger.debug(f"Loaded config from {config_file}")
    return config


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        if getattr(handler, "_tripdesk", False):
            root_logger.removeHandler(handler)
    console_handler._tripdesk = True
    root_logger.addHandler(console_handler)

    # Reduce noise from libraries
    logging.getLogger("markdown_it").setLevel(logging.WARNING)
