"""
Shape Event Publisher
====================

Bounded Context: Shape Event Message Production

Publishes shape lifecycle notifications (created / updated / deleted).

Design:
- Inherits from BasePublisher (connection management)
- attach() chains onto a DrawEngine's collection hooks, so an
  application keeps its own callbacks and still gets MQTT fan-out
- Features are exported with the engine's own GeoJSON projection

Message Flow:
    DrawEngine commit/replace/remove → ShapeEventMessage → ShapeEventPublisher → MQTT Broker

Example:
    >>> from mapsketch_mqtt.publishers import ShapeEventPublisher
    >>> from mapsketch_mqtt.logging import create_logger
    >>>
    >>> publisher = ShapeEventPublisher(
    ...     broker_host="localhost",
    ...     topic="mapsketch/shapes",
    ...     session_id="map_01",
    ...     logger=create_logger("publisher")
    ... )
    >>> publisher.connect()
    >>> publisher.attach(engine)
"""

from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional

from mapsketch_draw.geometry.shapes import Shape

from .base import BasePublisher
from ..schemas import ShapeEventMessage, ShapeEventType
from ..logging import StructuredLogger, LogEvent


def _chain(first: Optional[Callable], second: Callable) -> Callable:
    """Call `first` (if any) then `second` with the same arguments."""
    def chained(*args):
        if first is not None:
            first(*args)
        second(*args)
    return chained


class ShapeEventPublisher(BasePublisher):
    """
    Publisher for shape lifecycle messages.

    Attributes:
        Same as BasePublisher, plus:
        session_id: Identifier stamped on every message
        published: Last `history_size` messages handed to publish(), most recent last
    """

    def __init__(
        self,
        broker_host: str,
        topic: str,
        logger: StructuredLogger,
        session_id: str = "default",
        broker_port: int = 1883,
        client_id: str = "mapsketch_shape_publisher",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 0,
        history_size: int = 256
    ):
        """
        Initialize shape event publisher.

        Args:
            broker_host: MQTT broker hostname
            topic: Topic to publish shape messages
            logger: Structured logger instance
            session_id: Drawing session identifier (default: "default")
            broker_port: MQTT broker port (default: 1883)
            client_id: MQTT client ID
            username: MQTT auth username (optional)
            password: MQTT auth password (optional)
            qos: Quality of Service (default: 0)
            history_size: Messages kept in `published` (default: 256)
        """
        super().__init__(
            broker_host=broker_host,
            broker_port=broker_port,
            topic=topic,
            client_id=client_id,
            logger=logger,
            username=username,
            password=password,
            qos=qos
        )
        self.session_id = session_id
        self.logger = self.logger.bind(session_id=session_id)
        if history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {history_size}")
        self.published: Deque[ShapeEventMessage] = deque(maxlen=history_size)

    def format_message(self, shape_event_msg: ShapeEventMessage) -> Dict[str, Any]:
        """Format ShapeEventMessage to a JSON-compatible dict."""
        formatted = shape_event_msg.to_dict()
        self.logger.debug(
            event=LogEvent.SHAPE_EVENT_SERIALIZED,
            message="Serialized shape event message",
            metadata={
                'event_type': shape_event_msg.event_type.value,
                'shape_ids': shape_event_msg.shape_ids,
            }
        )
        return formatted

    def publish_shape_event(
        self,
        shape_event_msg: ShapeEventMessage,
        retain: bool = False
    ) -> bool:
        """
        Format and publish a shape event message.

        The message is recorded in `published` even when the broker is
        unreachable.

        Returns:
            True if published successfully, False otherwise
        """
        self.published.append(shape_event_msg)
        return self.publish(self.format_message(shape_event_msg), retain=retain)

    def attach(self, engine: Any) -> None:
        """
        Publish every change made to `engine`'s shape collection.

        Existing callbacks on the collection keep running first.
        """
        collection = engine.collection

        def created(shape: Shape, shape_id: int) -> None:
            self._publish_shapes(ShapeEventType.CREATED, [collection.to_feature(shape_id, shape)])
            self.logger.info(
                event=LogEvent.SHAPE_CREATED,
                message=f"{shape.kind.value.capitalize()} created",
                metadata={'shape_id': shape_id}
            )

        def updated(shape: Shape, shape_id: int) -> None:
            self._publish_shapes(ShapeEventType.UPDATED, [collection.to_feature(shape_id, shape)])
            self.logger.info(
                event=LogEvent.SHAPE_UPDATED,
                message=f"{shape.kind.value.capitalize()} updated",
                metadata={'shape_id': shape_id}
            )

        def deleted(shape_ids: List[int]) -> None:
            self.publish_shape_event(ShapeEventMessage.for_deletion(self.session_id, shape_ids))
            self.logger.info(
                event=LogEvent.SHAPE_DELETED,
                message="Shapes deleted",
                metadata={'shape_ids': shape_ids}
            )

        collection.on_shape_created = _chain(collection.on_shape_created, created)
        collection.on_shape_updated = _chain(collection.on_shape_updated, updated)
        collection.on_shape_deleted = _chain(collection.on_shape_deleted, deleted)

    def _publish_shapes(self, event_type: ShapeEventType, features: List[Dict[str, Any]]) -> bool:
        message = ShapeEventMessage.for_shapes(self.session_id, event_type, features)
        return self.publish_shape_event(message)
