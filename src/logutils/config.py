"""Logging configuration for Owl & Lion Access.

Environment-aware defaults: rich console output while developing, plain
console output under pytest and CI, JSON to console and file in production.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

_TRUTHY = ("true", "1", "yes")


class Environment(Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"
    CI = "ci"


class LogOutput(Enum):
    """Where log records are written."""

    CONSOLE = "console"
    FILE = "file"
    BOTH = "both"
    JSON = "json"


@dataclass
class LogConfig:
    """Logging configuration container."""

    level: str = "INFO"
    output: LogOutput = LogOutput.CONSOLE
    json_format: bool = False
    use_rich: bool = True
    mask_sensitive: bool = True
    include_correlation_id: bool = True
    log_file: Path | None = None

    # Rotation settings for file output
    max_file_size: int = 5 * 1024 * 1024
    backup_count: int = 3

    # Per-logger level overrides, e.g. {"urllib3": "WARNING"}
    module_levels: dict[str, str] = field(default_factory=dict)

    # Static fields added to every JSON record
    extra_fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> LogConfig:
        """Build a configuration from the environment.

        Environment variables:
            LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
            LOG_OUTPUT: console, file, both or json
            LOG_JSON: emit JSON records (true/false)
            LOG_RICH: use the Rich console handler (true/false)
            LOG_MASK_SENSITIVE: mask tokens, codes and PII (true/false)
            LOG_FILE: path of the rotating log file

        Returns:
            LogConfig for the detected environment with overrides applied
        """
        config = cls.for_environment(cls.detect_environment())

        if level := os.getenv("LOG_LEVEL"):
            config.level = level.upper()

        if output := os.getenv("LOG_OUTPUT"):
            try:
                config.output = LogOutput(output.lower())
            except ValueError:
                pass

        if json_format := os.getenv("LOG_JSON"):
            config.json_format = json_format.lower() in _TRUTHY

        if use_rich := os.getenv("LOG_RICH"):
            config.use_rich = use_rich.lower() in _TRUTHY

        if mask_sensitive := os.getenv("LOG_MASK_SENSITIVE"):
            config.mask_sensitive = mask_sensitive.lower() in _TRUTHY

        if log_file := os.getenv("LOG_FILE"):
            config.log_file = Path(log_file)

        return config

    @staticmethod
    def detect_environment() -> Environment:
        """Detect the runtime environment from well-known variables."""
        if os.getenv("CI") or os.getenv("GITHUB_ACTIONS"):
            return Environment.CI

        env_name = os.getenv("ENVIRONMENT", os.getenv("ENV", "")).lower()
        if env_name in ("prod", "production"):
            return Environment.PRODUCTION
        if env_name in ("test", "testing") or os.getenv("PYTEST_CURRENT_TEST"):
            return Environment.TESTING

        return Environment.DEVELOPMENT

    @classmethod
    def for_environment(cls, env: Environment) -> LogConfig:
        """Default configuration for an environment."""
        # requests/urllib3 connection chatter is noise everywhere
        quiet = {"urllib3": "WARNING"}

        if env == Environment.PRODUCTION:
            return cls(
                level="INFO",
                output=LogOutput.BOTH,
                json_format=True,
                use_rich=False,
                module_levels=quiet,
            )
        if env in (Environment.CI, Environment.TESTING):
            return cls(
                level="DEBUG" if env == Environment.TESTING else "INFO",
                output=LogOutput.CONSOLE,
                use_rich=False,
                module_levels=quiet,
            )
        return cls(level="DEBUG", module_levels=quiet)


_config: LogConfig | None = None


def get_config() -> LogConfig:
    """Return the active logging configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = LogConfig.from_env()
    return _config


def set_config(config: LogConfig) -> None:
    """Replace the active logging configuration."""
    global _config
    _config = config


def reset_config() -> None:
    """Forget the active configuration so it is re-read from the environment."""
    global _config
    _config = None
