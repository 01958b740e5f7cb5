"""Per-request logging context.

Streamlit reruns the script once per browser event; each rerun and each CLI
command runs inside a ``with_context`` block so that every record it emits
carries the same correlation id together with the signed-in user and role.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any


def _new_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class LogContext:
    """Contextual fields attached to log records."""

    correlation_id: str = field(default_factory=_new_correlation_id)
    operation: str | None = None
    user_id: str | None = None
    role: str | None = None
    component: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Only the populated fields, correlation id first."""
        result: dict[str, Any] = {"correlation_id": self.correlation_id}
        for name in ("operation", "user_id", "role", "component"):
            value = getattr(self, name)
            if value:
                result[name] = value
        result.update(self.extra)
        return result


_log_context: ContextVar[LogContext | None] = ContextVar("log_context", default=None)


def get_context() -> LogContext:
    """Current context; a fresh one is created when none is active."""
    ctx = _log_context.get()
    if ctx is None:
        ctx = LogContext()
        _log_context.set(ctx)
    return ctx


def set_context(context: LogContext) -> None:
    _log_context.set(context)


def clear_context() -> None:
    _log_context.set(None)


def get_correlation_id() -> str:
    return get_context().correlation_id


def update_context(**kwargs: Any) -> None:
    """Set fields on the current context; unknown names go into ``extra``."""
    ctx = get_context()
    for key, value in kwargs.items():
        if key != "extra" and hasattr(ctx, key):
            setattr(ctx, key, value)
        else:
            ctx.extra[key] = value


class ContextManager:
    """Installs a context for the duration of a ``with`` block.

    Fields not given explicitly are inherited from the enclosing context, so
    a nested ``with_context(operation=...)`` keeps the outer user and role.
    """

    def __init__(
        self,
        correlation_id: str | None = None,
        operation: str | None = None,
        user_id: str | None = None,
        role: str | None = None,
        component: str | None = None,
        **extra: Any,
    ) -> None:
        self._overrides = {
            "correlation_id": correlation_id,
            "operation": operation,
            "user_id": user_id,
            "role": role,
            "component": component,
        }
        self._extra = extra
        self._previous: LogContext | None = None

    def __enter__(self) -> LogContext:
        self._previous = _log_context.get()
        base = self._previous or LogContext()
        values = {
            name: override if override is not None else getattr(base, name)
            for name, override in self._overrides.items()
        }
        context = LogContext(**values, extra={**base.extra, **self._extra})
        _log_context.set(context)
        return context

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _log_context.set(self._previous)

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def with_context(
    correlation_id: str | None = None,
    operation: str | None = None,
    user_id: str | None = None,
    role: str | None = None,
    component: str | None = None,
    **extra: Any,
) -> ContextManager:
    """Scope a logging context.

    Usage:
        with with_context(operation="code_exchange", component="auth"):
            logger.info("Exchanging authorization code")
    """
    return ContextManager(
        correlation_id=correlation_id,
        operation=operation,
        user_id=user_id,
        role=role,
        component=component,
        **extra,
    )
