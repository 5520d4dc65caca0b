"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

One JSON object per log line, keyed by a typed LogEvent.

Design:
- Built on the standard logging module (handlers, levels, propagation)
- Static context bound once (component, session_id, broker) and merged
  into every entry, so call sites only pass what changes
- Type-safe events (LogEvent enum)

Example:
    >>> logger = create_logger("publisher").bind(session_id="map_01")
    >>> logger.info(
    ...     event=LogEvent.SHAPE_CREATED,
    ...     message="Circle committed",
    ...     metadata={'shape_id': 3}
    ... )

Output:
    {"timestamp": "2026-10-19T15:30:45.123456+00:00", "level": "INFO",
     "component": "publisher", "event": "shape.created",
     "message": "Circle committed",
     "metadata": {"session_id": "map_01", "shape_id": 3}}
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .events import LogEvent


class JSONFormatter(logging.Formatter):
    """Emits the pre-rendered JSON message untouched."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class StructuredLogger:
    """
    JSON structured logger.

    Attributes:
        component: Component name (e.g. "publisher", "cli")
        context: Metadata merged into every entry
        logger: Underlying logging.Logger ("mapsketch_mqtt.<component>")
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.component = component
        self.context = dict(context or {})
        self.logger = logging.getLogger(logger_name or f"mapsketch_mqtt.{component}")
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def bind(self, **context: Any) -> 'StructuredLogger':
        """
        Child logger sharing the same handler, with extra bound context.

        Example:
            >>> pub_logger = logger.bind(topic="mapsketch/shapes")
        """
        child = StructuredLogger.__new__(StructuredLogger)
        child.component = self.component
        child.context = {**self.context, **context}
        child.logger = self.logger
        return child

    def render(
        self,
        level: str,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> Dict[str, Any]:
        """Build the entry dict (exposed for tests and custom sinks)."""
        entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level,
            'component': self.component,
            'event': event.value,
            'message': message,
        }

        merged = {**self.context, **(metadata or {})}
        if merged:
            entry['metadata'] = merged

        if exc_info is not None:
            entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info),
            }
        return entry

    def _emit(
        self,
        level: str,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        levelno = logging.getLevelName(level)
        if not self.logger.isEnabledFor(levelno):
            return
        entry = self.render(level, event, message, metadata, exc_info)
        self.logger.log(levelno, json.dumps(entry, default=str))

    def debug(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit('DEBUG', event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit('INFO', event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Example:
            >>> logger.warning(
            ...     event=LogEvent.SESSION_VALIDATION_FAILED,
            ...     message="Polygon needs 3 points",
            ...     metadata={'vertex_count': 2}
            ... )
        """
        self._emit('WARNING', event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """ERROR entry; the exception type and text go into the JSON."""
        self._emit('ERROR', event, message, metadata, exc_info)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)


def create_logger(
    component: str,
    level: int = logging.INFO,
    **context: Any
) -> StructuredLogger:
    """
    Factory for a StructuredLogger.

    Example:
        >>> logger = create_logger("cli", level=logging.DEBUG, script="park.yaml")
    """
    return StructuredLogger(component=component, level=level, context=context)
