"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators

Event Naming Convention:
    <component>.<category>.<action>

    component: mqtt, shape, session, error
    category: connected, publish, created
    action: success, failed
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - mqtt.*: MQTT broker interactions
    - shape.*: Committed shape lifecycle
    - session.*: Drawing session replay
    - error.*: Error conditions
    """

    # ========== MQTT Events ==========
    MQTT_CONNECTED = "mqtt.connected"
    """MQTT broker connection established."""

    MQTT_DISCONNECTED = "mqtt.disconnected"
    """MQTT broker connection lost."""

    MQTT_PUBLISH_SUCCESS = "mqtt.publish.success"
    """Message successfully published to broker."""

    MQTT_PUBLISH_FAILED = "mqtt.publish.failed"
    """Message publication failed."""

    # ========== Shape Events ==========
    SHAPE_CREATED = "shape.created"
    """Shape committed by a drawing session."""

    SHAPE_UPDATED = "shape.updated"
    """Committed shape replaced by the host."""

    SHAPE_DELETED = "shape.deleted"
    """Committed shapes removed by the host."""

    SHAPE_EVENT_SERIALIZED = "shape.event.serialized"
    """Shape event message serialized to JSON."""

    SHAPE_EVENT_RECEIVED = "shape.event.received"
    """Shape event message received by subscriber."""

    # ========== Session Events ==========
    SESSION_REPLAYED = "session.replayed"
    """Scripted drawing session replayed."""

    SESSION_VALIDATION_FAILED = "session.validation_failed"
    """A finalise attempt was rejected (e.g. polygon with < 3 points)."""

    # ========== Error Events ==========
    SERIALIZATION_ERROR = "error.serialization"
    """Failed to serialize message to JSON."""

    DESERIALIZATION_ERROR = "error.deserialization"
    """Failed to deserialize message from JSON."""

    SCHEMA_VALIDATION_ERROR = "error.schema_validation"
    """Message failed schema validation."""

    MQTT_CONNECTION_ERROR = "error.mqtt_connection"
    """Failed to connect to MQTT broker."""

    MQTT_PUBLISH_ERROR = "error.mqtt_publish"
    """Error during message publication."""

    SCRIPT_ERROR = "error.script"
    """Scripted session could not be loaded or run."""
