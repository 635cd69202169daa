"""Configuration loading and validation."""

import json
import logging
import os
from dataclasses import dataclass, field

from core.exceptions import ConfigError

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class AppsConfig:
    """Configuration for app discovery and toggles."""
    apps_dir: str = "content/apps"
    enabled_map: dict[str, bool] = field(default_factory=dict)
    log_dir: str = "content/logs"
    log_level: str = "INFO"

    def is_enabled(self, name: str) -> bool:
        return self.enabled_map.get(name, True)

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level)


@dataclass
class HostConfig:
    """Complete host configuration."""
    apps: AppsConfig = field(default_factory=AppsConfig)
    data_dir: str = "content"


def load_config(config_path: str = "config.json") -> HostConfig:
    """Load configuration from JSON file with defaults."""
    if not os.path.exists(config_path):
        return HostConfig()

    try:
        with open(config_path, "r") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}")

    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a JSON object")

    data_dir = raw.get("data_dir", "content")
    if not isinstance(data_dir, str) or not data_dir.strip():
        raise ConfigError("data_dir must be a non-empty string")

    apps_raw = raw.get("apps", {})
    apps = _load_apps_settings(apps_raw, data_dir)

    return HostConfig(apps=apps, data_dir=data_dir)


def _load_apps_settings(raw: dict, data_dir: str) -> AppsConfig:
    """Parse and validate app settings."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("apps must be an object")

    apps_dir = _coerce_path(raw.get("apps_dir", os.path.join(data_dir, "apps")), "apps.apps_dir")
    log_dir = _coerce_path(raw.get("log_dir", os.path.join(data_dir, "logs")), "apps.log_dir")

    enabled_raw = raw.get("enabled", {})
    if enabled_raw is None:
        enabled_raw = {}
    if not isinstance(enabled_raw, dict):
        raise ConfigError("apps.enabled must be an object mapping app name to boolean")
    enabled_map: dict[str, bool] = {}
    for key, value in enabled_raw.items():
        if not isinstance(key, str) or not key.strip():
            raise ConfigError("apps.enabled keys must be non-empty strings")
        if not isinstance(value, bool):
            raise ConfigError(f"apps.enabled.{key} must be a boolean")
        enabled_map[key.strip()] = value

    log_level = raw.get("log_level", "INFO")
    if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
        raise ConfigError(f"apps.log_level must be one of {', '.join(LOG_LEVELS)}")

    return AppsConfig(
        apps_dir=apps_dir,
        enabled_map=enabled_map,
        log_dir=log_dir,
        log_level=log_level.upper(),
    )


def _coerce_path(value: object, name: str) -> str:
    """Validate a directory setting."""
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return value.strip()
