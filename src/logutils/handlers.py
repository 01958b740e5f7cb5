"""Log handlers: Rich console output and a rotating log file."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.text import Text


class RichConsoleHandler(logging.Handler):
    """Colourised stderr output through a Rich console."""

    LEVEL_STYLES = {
        "DEBUG": "dim",
        "INFO": "blue",
        "WARNING": "yellow",
        "ERROR": "red bold",
        "CRITICAL": "red bold reverse",
    }

    def __init__(self, console: Console | None = None, show_path: bool = False) -> None:
        super().__init__()
        self.console = console or Console(stderr=True)
        self.show_path = show_path

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = Text(self.format(record), style=self.LEVEL_STYLES.get(record.levelname, ""))
            if self.show_path:
                text.append(f" ({record.filename}:{record.lineno})", style="dim")
            self.console.print(text)
        except Exception:
            self.handleError(record)


class SafeRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that creates the log directory and writes UTF-8."""

    def __init__(self, filename: str | Path, max_bytes: int, backup_count: int) -> None:
        log_path = Path(filename).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            filename=str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
