"""
Configuration management
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError
from .jikan import DEFAULT_JIKAN_URL
from .rate_limit import MIN_REQUEST_INTERVAL

SCHEDULE_UNITS = ["seconds", "minutes", "hours", "days", "weeks"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass
class Config:
    """Application configuration"""

    jikan_url: str = DEFAULT_JIKAN_URL
    request_delay: float = MIN_REQUEST_INTERVAL
    request_timeout: float = 10
    max_run_seconds: float | None = None  # Wall-clock cap for one run
    database_path: str = "watchlog.db"
    user_id: str = "local"
    log_level: str = "WARNING"
    search_limit: int = 10
    schedule_interval: int = 6
    schedule_unit: str = "hours"

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """Load configuration from a YAML file"""
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls._build(data)

    @classmethod
    def from_env_and_file(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file and/or environment variables"""
        config_data: dict[str, Any] = {}

        # Load from file if specified
        if config_path and config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        # Environment variables take priority
        if os.getenv("JIKAN_URL"):
            config_data["jikan_url"] = os.getenv("JIKAN_URL")
        if os.getenv("WATCHLOG_DB"):
            config_data["database_path"] = os.getenv("WATCHLOG_DB")
        if os.getenv("WATCHLOG_USER"):
            config_data["user_id"] = os.getenv("WATCHLOG_USER")

        for env_name, key in (
            ("REQUEST_DELAY", "request_delay"),
            ("REQUEST_TIMEOUT", "request_timeout"),
            ("MAX_RUN_SECONDS", "max_run_seconds"),
        ):
            value = os.getenv(env_name)
            if value:
                try:
                    config_data[key] = float(value)
                except ValueError as e:
                    raise ConfigError(f"{env_name} must be a number, got {value!r}") from e

        return cls._build(config_data)

    @classmethod
    def _build(cls, data: dict) -> "Config":
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        config = cls(**data)
        config.validate()
        return config

    def validate(self):
        """
        Check value ranges

        Raises:
            ConfigError: if a value is out of range
        """
        if not self.jikan_url:
            raise ConfigError("jikan_url is required")
        if self.request_delay < MIN_REQUEST_INTERVAL:
            raise ConfigError(
                f"request_delay must be at least {MIN_REQUEST_INTERVAL} seconds"
            )
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")
        if self.max_run_seconds is not None and self.max_run_seconds <= 0:
            raise ConfigError("max_run_seconds must be positive")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {self.log_level}. "
                f"Valid levels: {', '.join(LOG_LEVELS)}"
            )
        if not self.user_id:
            raise ConfigError("user_id is required")
        if self.search_limit < 1:
            raise ConfigError("search_limit must be at least 1")
        if self.schedule_interval < 1:
            raise ConfigError("schedule_interval must be at least 1")
        if self.schedule_unit not in SCHEDULE_UNITS:
            raise ConfigError(
                f"Invalid schedule unit: {self.schedule_unit}. "
                f"Valid units: {', '.join(SCHEDULE_UNITS)}"
            )

    def to_file(self, config_path: Path):
        """Save configuration to a YAML file"""
        data = {
            "jikan_url": self.jikan_url,
            "request_delay": self.request_delay,
            "request_timeout": self.request_timeout,
            "max_run_seconds": self.max_run_seconds,
            "database_path": self.database_path,
            "user_id": self.user_id,
            "log_level": self.log_level,
            "search_limit": self.search_limit,
            "schedule_interval": self.schedule_interval,
            "schedule_unit": self.schedule_unit,
        }

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True)
