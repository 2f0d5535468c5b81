"""
Structured Logging for Landgrab
===============================

Bounded Context: Observability

JSON-structured logging for the geometry engine and its hosts.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from landgrab_geo.logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="session")
    >>> logger.info(
    ...     event=LogEvent.SAMPLE_ACCEPTED,
    ...     message="Sample accepted",
    ...     metadata={'point_count': 4}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, JSONFormatter, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'JSONFormatter',
    'create_logger',
]
