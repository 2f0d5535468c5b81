"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

Event-typed logging for the engine and its hosts. Callers log a LogEvent
with a human message and a metadata dict; the entry travels on the
LogRecord (`record.structured`) and JSONFormatter renders it as one JSON
line.

Design:
- Standard logging underneath: handlers, levels and propagation behave as usual
- The record message stays human-readable; JSON is produced by the formatter
- Bound context (owner_id, session id, ...) is merged into every entry
- Plain records from `logging.getLogger(__name__)` render as JSON too when
  they pass through JSONFormatter

Example:
    >>> logger = StructuredLogger(component="session").bind(owner_id="player-1")
    >>> logger.info(
    ...     event=LogEvent.PATH_CLOSED,
    ...     message="Path closed",
    ...     metadata={'point_count': 12, 'area_m2': 6400.0}
    ... )

Output:
    {"timestamp": "2025-10-01T08:02:00.123456+00:00", "level": "INFO",
     "component": "session", "event": "path.closed", "message": "Path closed",
     "context": {"owner_id": "player-1"},
     "metadata": {"point_count": 12, "area_m2": 6400.0}}
"""

import copy
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .events import LogEvent


STRUCTURED_ATTR = "structured"


class StructuredLogger:
    """
    Emits LogEvent entries through a standard logger.

    Attributes:
        component: Component name (e.g., "session", "tracker")
        logger_name: Name of the underlying logger (landgrab.<component>)
        context: Key/values attached to every entry

    Thread Safety:
        Thread-safe via Python's logging module. bind() returns a new
        instance; the context of an existing one never changes.
    """

    def __init__(
        self,
        component: str,
        level: Optional[int] = None,
        logger_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.component = component
        self.logger_name = logger_name or f"landgrab.{component}"
        self.context: Dict[str, Any] = dict(context or {})
        self.logger = logging.getLogger(self.logger_name)
        # None leaves the level to whoever configured the logger.
        if level is not None:
            self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def bind(self, **context: Any) -> "StructuredLogger":
        """Copy of this logger with extra context merged in (level untouched)."""
        bound = copy.copy(self)
        bound.context = {**self.context, **context}
        return bound

    def emit(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc: Optional[BaseException] = None,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        entry: Dict[str, Any] = {
            'component': self.component,
            'event': event.value,
        }
        if self.context:
            entry['context'] = dict(self.context)
        if metadata:
            entry['metadata'] = metadata
        if exc is not None:
            entry['exception'] = {'type': type(exc).__name__, 'message': str(exc)}

        self.logger.log(level, message, extra={STRUCTURED_ATTR: entry})

    def debug(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Per-sample detail (accepted/rejected fixes)."""
        self.emit(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.emit(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.emit(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None,
    ) -> None:
        """
        Log an error event.

        Example:
            >>> try:
            ...     GeoPoint(latitude=float("nan"), longitude=0.0)
            ... except ValueError as e:
            ...     logger.error(
            ...         event=LogEvent.INVALID_SAMPLE,
            ...         message="Dropped malformed fix",
            ...         exc_info=e,
            ...     )
        """
        self.emit(logging.ERROR, event, message, metadata, exc=exc_info)

    def set_level(self, level: int) -> None:
        """Change the underlying logger's level (affects every bound copy)."""
        self.logger.setLevel(level)


class JSONFormatter(logging.Formatter):
    """
    Renders records as single-line JSON.

    Records from StructuredLogger contribute their entry; any other record
    becomes {timestamp, level, component=<logger name>, message}.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'component': record.name,
        }
        structured = getattr(record, STRUCTURED_ATTR, None)
        if structured:
            entry.update(structured)
        entry['message'] = record.getMessage()

        if record.exc_info and 'exception' not in entry:
            exc = record.exc_info[1]
            entry['exception'] = {'type': type(exc).__name__, 'message': str(exc)}

        return json.dumps(entry, default=str)


def create_logger(component: str, level: Optional[int] = None, **context: Any) -> StructuredLogger:
    """
    Factory for a StructuredLogger, optionally pre-bound.

    Example:
        >>> logger = create_logger("tracker", level=logging.DEBUG, owner_id="player-1")
    """
    return StructuredLogger(component=component, level=level, context=context)
