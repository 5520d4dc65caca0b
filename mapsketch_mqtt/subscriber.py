"""
MQTT Subscriber
==============

Bounded Context: Message Consumption

Receives shape lifecycle messages from the broker and hands typed
ShapeEventMessage objects to a callback.

Design:
- Subscribes in on_connected(), so a reconnect re-subscribes
- Invalid payloads are counted, logged and dropped; they never raise
  into the paho network thread
- Callbacks run in the network thread: keep them short

Message Flow:
    MQTT Broker → ShapeEventSubscriber → ShapeEventMessage → on_shape_event

Example:
    >>> from mapsketch_mqtt import ShapeEventSubscriber, create_logger
    >>>
    >>> subscriber = ShapeEventSubscriber(
    ...     broker_host="localhost",
    ...     topic="mapsketch/shapes",
    ...     on_shape_event=lambda msg: print(msg.event_type.value, msg.shape_ids),
    ...     logger=create_logger("subscriber")
    ... )
    >>> subscriber.connect()
    >>> # ... callbacks arrive in the background ...
    >>> subscriber.disconnect()
"""

import json
from typing import Any, Callable, Dict, Optional

import paho.mqtt.client as mqtt

from .connection import MQTTConnection
from .logging import LogEvent, StructuredLogger
from .schemas import ShapeEventMessage


class ShapeEventSubscriber(MQTTConnection):
    """
    MQTT subscriber for shape event messages.

    Attributes:
        topic: Topic carrying shape event messages
        on_shape_event: Called with each valid ShapeEventMessage
    """

    def __init__(
        self,
        broker_host: str,
        topic: str,
        on_shape_event: Callable[[ShapeEventMessage], None],
        logger: StructuredLogger,
        broker_port: int = 1883,
        client_id: str = "mapsketch_subscriber",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 0
    ):
        super().__init__(
            broker_host=broker_host,
            broker_port=broker_port,
            client_id=client_id,
            logger=logger.bind(topic=topic),
            username=username,
            password=password,
            qos=qos,
        )
        self.topic = topic
        self.on_shape_event = on_shape_event
        self.client.on_message = self._on_message
        self._received = 0
        self._rejected = 0

    def on_connected(self, client: mqtt.Client) -> None:
        client.subscribe(self.topic, qos=self.qos)

    def _on_message(self, client: mqtt.Client, userdata: Any, msg: mqtt.MQTTMessage) -> None:
        if msg.topic != self.topic:
            self.logger.warning(
                event=LogEvent.DESERIALIZATION_ERROR,
                message=f"Ignoring message from unexpected topic {msg.topic}"
            )
            return

        try:
            data = json.loads(msg.payload.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self._reject()
            self.logger.error(
                event=LogEvent.DESERIALIZATION_ERROR,
                message="Payload is not valid JSON",
                exc_info=e
            )
            return

        self._handle_shape_event_message(data)

    def _handle_shape_event_message(self, data: Dict[str, Any]) -> Optional[ShapeEventMessage]:
        """
        Validate `data` and invoke the callback.

        Returns:
            The parsed message, or None if it failed schema validation
        """
        try:
            shape_event_msg = ShapeEventMessage.from_dict(data)
        except ValueError as e:
            self._reject()
            self.logger.error(
                event=LogEvent.SCHEMA_VALIDATION_ERROR,
                message="Shape event message failed schema validation",
                exc_info=e,
                metadata={'data': data}
            )
            return None

        with self._stats_lock:
            self._received += 1

        self.logger.info(
            event=LogEvent.SHAPE_EVENT_RECEIVED,
            message=f"Received {shape_event_msg.event_type.value} event",
            metadata={
                'shape_ids': shape_event_msg.shape_ids,
                'shape_count': shape_event_msg.shape_count,
                'session_id': shape_event_msg.session_id
            }
        )
        self.on_shape_event(shape_event_msg)
        return shape_event_msg

    def _reject(self) -> None:
        with self._stats_lock:
            self._rejected += 1

    def get_stats(self) -> Dict[str, Any]:
        """Connection status plus received / rejected message counts."""
        with self._stats_lock:
            counts = {'messages_received': self._received, 'messages_rejected': self._rejected}
        return {**super().get_stats(), **counts, 'topic': self.topic}
