"""
MapSketch MQTT Communication Package
====================================

Bounded Context: Shape Event Distribution

MQTT messaging for MapSketch: every shape committed, replaced or
removed in a DrawEngine can be fanned out to other processes.

Architecture:
- schemas/: Immutable data structures with type safety
- publishers/: Message producers (ShapeEventPublisher)
- connection.py: paho-mqtt client lifecycle shared by both sides
- subscriber.py: Message consumer (ShapeEventSubscriber)
- logging/: Structured JSON logging for observability

Public API
----------
Schemas:
    Timestamp, ShapeEventType, ShapeEventMessage

Publishers:
    ShapeEventPublisher
    BasePublisher (for custom publishers)

Subscriber:
    ShapeEventSubscriber

Logging:
    LogEvent, StructuredLogger, create_logger

Example:
    >>> from mapsketch_mqtt import ShapeEventPublisher, create_logger
    >>>
    >>> publisher = ShapeEventPublisher(
    ...     broker_host="localhost",
    ...     topic="mapsketch/shapes",
    ...     logger=create_logger("publisher")
    ... )
    >>> publisher.connect()
    >>> publisher.attach(engine)
"""

# Version
__version__ = "1.0.0"

# Schemas
from .schemas import (
    SCHEMA_VERSION,
    Timestamp,
    ShapeEventType,
    ShapeEventMessage,
)

# Publishers
from .publishers import (
    BasePublisher,
    ShapeEventPublisher,
)

# Connection & subscriber
from .connection import MQTTConnection
from .subscriber import ShapeEventSubscriber

# Logging
from .logging import (
    LogEvent,
    StructuredLogger,
    create_logger,
)

__all__ = [
    '__version__',
    'SCHEMA_VERSION',
    'Timestamp',
    'ShapeEventType',
    'ShapeEventMessage',
    'MQTTConnection',
    'BasePublisher',
    'ShapeEventPublisher',
    'ShapeEventSubscriber',
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
