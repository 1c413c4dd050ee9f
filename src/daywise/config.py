"""Configuration file loading.

A single YAML file (``daywise_config.yaml``) supplies default preferences for
requests that omit them and the scheduler's algorithm knobs::

    preferences:
      working_hours: {start: "08:30", end: "16:30"}
      working_days: [monday, tuesday, wednesday, thursday]
      break_duration: 10
    scheduler:
      default_window_days: 14
      cache_ttl_seconds: 60
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .exceptions import ConfigError
from .models import Preferences
from .scheduler import SchedulingConfig

DEFAULT_CONFIG_NAME = "daywise_config.yaml"


class DaywiseConfig(BaseModel):
    """Preferences defaults plus scheduler configuration."""

    preferences: Preferences | None = None
    scheduler: SchedulingConfig = Field(default_factory=SchedulingConfig)


def load_config(config_path: Path | str) -> DaywiseConfig:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the file is empty or not a mapping
        ValueError: If a section fails validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open() as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ConfigError("Empty configuration file")
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - {"preferences", "scheduler"})
    if unknown:
        raise ConfigError(f"Unknown config section(s): {', '.join(unknown)}")

    preferences = None
    if data.get("preferences") is not None:
        preferences = Preferences.model_validate(data["preferences"])

    scheduler_config = SchedulingConfig()
    if data.get("scheduler") is not None:
        scheduler_config = SchedulingConfig.model_validate(data["scheduler"])

    return DaywiseConfig(preferences=preferences, scheduler=scheduler_config)


def discover_config(config_path: Path | None = None) -> DaywiseConfig:
    """Load the explicit config, else ``daywise_config.yaml`` in the cwd, else defaults."""
    if config_path is not None:
        return load_config(config_path)

    cwd_config = Path(DEFAULT_CONFIG_NAME)
    if cwd_config.exists():
        return load_config(cwd_config)
    return DaywiseConfig()
