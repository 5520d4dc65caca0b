"""
Structured Logging for MapSketch
================================

Bounded Context: Observability

JSON-structured logging with typed event names.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from mapsketch_mqtt.logging import create_logger, LogEvent
    >>> logger = create_logger("publisher")
    >>> logger.info(
    ...     event=LogEvent.SHAPE_CREATED,
    ...     message="Rectangle committed",
    ...     metadata={'shape_id': 2}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
