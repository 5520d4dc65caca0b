"""
MapSketch MQTT Schemas
=====================

Bounded Context: Data Structures

Immutable, typed data structures for MQTT messages.

Design:
- Frozen dataclasses (immutability)
- to_dict() for JSON serialization
- from_dict() for deserialization
- Schema versioning for evolution

Public API
----------
Common Types:
    Timestamp: ISO 8601 timestamp wrapper

Shape Event Types:
    ShapeEventType: Enum (CREATED, UPDATED, DELETED)
    ShapeEventMessage: Complete shape event message
"""

from .common import Timestamp
from .shape_event import SCHEMA_VERSION, ShapeEventType, ShapeEventMessage

__all__ = [
    'SCHEMA_VERSION',
    'Timestamp',
    'ShapeEventType',
    'ShapeEventMessage',
]
