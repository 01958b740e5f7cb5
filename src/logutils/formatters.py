"""Log formatters.

- ``JSONFormatter``: one JSON object per record, used for production and
  file output
- ``StandardFormatter``: timestamped plain text with the correlation id
- ``CompactFormatter``: ``[LEVEL] message`` for the Rich console and CLI
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any

from .context import get_context
from .masking import mask_dict, mask_sensitive_string


class JSONFormatter(logging.Formatter):
    """Structured JSON output."""

    def __init__(
        self,
        include_context: bool = True,
        mask_sensitive: bool = True,
        extra_fields: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the formatter.

        Args:
            include_context: Add the active LogContext under ``context``
            mask_sensitive: Mask tokens, codes and PII in message and extras
            extra_fields: Static fields merged into every record
        """
        super().__init__()
        self.include_context = include_context
        self.mask_sensitive = mask_sensitive
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if self.mask_sensitive:
            message = mask_sensitive_string(message)

        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        if self.include_context:
            log_data["context"] = get_context().to_dict()

        if record.exc_info and record.exc_info[0]:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": "".join(traceback.format_exception(*record.exc_info)),
            }

        extra = getattr(record, "extra_data", None)
        if extra:
            if self.mask_sensitive and isinstance(extra, dict):
                extra = mask_dict(extra)
            log_data["extra"] = extra

        log_data.update(self.extra_fields)
        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """``TIMESTAMP - LEVEL - LOGGER - [CORRELATION_ID] - MESSAGE``"""

    DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - [%(correlation_id)s] - %(message)s"
    DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        mask_sensitive: bool = True,
    ) -> None:
        super().__init__(fmt=fmt or self.DEFAULT_FORMAT, datefmt=datefmt or self.DEFAULT_DATE_FORMAT)
        self.mask_sensitive = mask_sensitive

    def format(self, record: logging.LogRecord) -> str:
        record.correlation_id = get_context().correlation_id
        if not self.mask_sensitive:
            return super().format(record)

        original_msg, original_args = record.msg, record.args
        record.msg, record.args = mask_sensitive_string(record.getMessage()), None
        try:
            return super().format(record)
        finally:
            record.msg, record.args = original_msg, original_args


class CompactFormatter(logging.Formatter):
    """``[LEVEL] message``"""

    LEVEL_LABELS = {
        "DEBUG": "DEBUG",
        "INFO": "INFO ",
        "WARNING": "WARN ",
        "ERROR": "ERROR",
        "CRITICAL": "CRIT ",
    }

    def __init__(self, mask_sensitive: bool = True) -> None:
        super().__init__()
        self.mask_sensitive = mask_sensitive

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelname, record.levelname)
        message = record.getMessage()
        if self.mask_sensitive:
            message = mask_sensitive_string(message)
        return f"[{label}] {message}"
