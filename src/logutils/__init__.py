"""Owl & Lion Access logging.

Usage:
    from src.logutils import get_logger, with_context

    logger = get_logger(__name__)

    with with_context(operation="roster_fetch", role="tutor"):
        logger.info("Fetched roster", extra={"extra_data": {"count": 3}})
"""

from .config import Environment, LogConfig, LogOutput, get_config, reset_config, set_config
from .context import (
    LogContext,
    clear_context,
    get_context,
    get_correlation_id,
    set_context,
    update_context,
    with_context,
)
from .formatters import CompactFormatter, JSONFormatter, StandardFormatter
from .handlers import RichConsoleHandler, SafeRotatingFileHandler
from .logger import configure_third_party, get_logger, reset_logging
from .masking import MASK, SensitiveValue, is_sensitive_key, mask_dict, mask_sensitive_string

__all__ = [
    "get_logger",
    "configure_third_party",
    "reset_logging",
    "with_context",
    "get_context",
    "set_context",
    "clear_context",
    "get_correlation_id",
    "update_context",
    "LogContext",
    "LogConfig",
    "LogOutput",
    "Environment",
    "get_config",
    "set_config",
    "reset_config",
    "JSONFormatter",
    "StandardFormatter",
    "CompactFormatter",
    "RichConsoleHandler",
    "SafeRotatingFileHandler",
    "mask_sensitive_string",
    "mask_dict",
    "is_sensitive_key",
    "SensitiveValue",
    "MASK",
]
