"""Central reporting of recoverable crop session failures."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from ..events.bus import Event, EventBus


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}

NotifyCallback = Callable[[str, ErrorSeverity], None]


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    """Published for every failure passed to :meth:`ErrorHandler.handle`."""

    error: Exception
    severity: ErrorSeverity
    context: dict[str, Any] = field(default_factory=dict)


class ErrorHandler:
    """Log a failure, publish it on the bus and keep the session running.

    Image load and pixel export problems never propagate out of pointer
    callbacks; they end up here instead.  A host may register a notifier to
    surface ``ERROR`` and ``CRITICAL`` failures to the user.
    """

    def __init__(self, logger: logging.Logger, event_bus: EventBus) -> None:
        self._logger = logger
        self._events = event_bus
        self._notify: Optional[NotifyCallback] = None

    def register_ui_callback(self, callback: NotifyCallback) -> None:
        self._notify = callback

    def handle(
        self,
        error: Exception,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        details = dict(context or {})
        self._logger.log(
            _LOG_LEVELS[severity],
            "%s: %s",
            type(error).__name__,
            error,
            extra={"context": details},
        )
        self._events.publish(ErrorOccurredEvent(error=error, severity=severity, context=details))

        if self._notify is not None and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self._notify(str(error), severity)
