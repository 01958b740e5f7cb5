"""Logger factory for Owl & Lion Access."""

from __future__ import annotations

import logging
import sys

from .config import LogConfig, LogOutput, get_config
from .formatters import CompactFormatter, JSONFormatter, StandardFormatter
from .handlers import RichConsoleHandler, SafeRotatingFileHandler

_configured_loggers: set[str] = set()


def get_logger(name: str | None = None, config: LogConfig | None = None) -> logging.Logger:
    """Return a logger configured from ``config`` (or the active config).

    Args:
        name: Logger name, normally ``__name__``
        config: Configuration override, used by tests

    Returns:
        Configured Logger instance
    """
    logger = logging.getLogger(name)
    key = name or "root"
    if key not in _configured_loggers:
        _configure_logger(logger, config or get_config())
        _configured_loggers.add(key)
    return logger


def _configure_logger(logger: logging.Logger, config: LogConfig) -> None:
    level = config.module_levels.get(logger.name, config.level)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logger.handlers.clear()
    if logger.name != "root":
        logger.propagate = False

    for handler in _create_handlers(config):
        logger.addHandler(handler)


def _create_handlers(config: LogConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    json_formatter = JSONFormatter(
        mask_sensitive=config.mask_sensitive,
        extra_fields=config.extra_fields,
    )

    if config.output in (LogOutput.CONSOLE, LogOutput.BOTH, LogOutput.JSON):
        handler: logging.Handler
        if config.json_format or config.output == LogOutput.JSON:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(json_formatter)
        elif config.use_rich:
            handler = RichConsoleHandler()
            handler.setFormatter(CompactFormatter(mask_sensitive=config.mask_sensitive))
        else:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StandardFormatter(mask_sensitive=config.mask_sensitive))
        handlers.append(handler)

    if config.output in (LogOutput.FILE, LogOutput.BOTH) and config.log_file:
        file_handler = SafeRotatingFileHandler(
            filename=config.log_file,
            max_bytes=config.max_file_size,
            backup_count=config.backup_count,
        )
        # Files are always JSON
        file_handler.setFormatter(json_formatter)
        handlers.append(file_handler)

    return handlers


def configure_third_party(config: LogConfig | None = None) -> None:
    """Apply ``module_levels`` to libraries that log through the root logger."""
    cfg = config or get_config()
    for name, level in cfg.module_levels.items():
        logging.getLogger(name).setLevel(getattr(logging, level.upper(), logging.WARNING))


def reset_logging() -> None:
    """Drop handlers from every logger configured here. Used by tests."""
    for name in _configured_loggers:
        logging.getLogger(None if name == "root" else name).handlers.clear()
    _configured_loggers.clear()
