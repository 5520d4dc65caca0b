"""
Base MQTT Publisher
==================

Bounded Context: MQTT Infrastructure

Abstract base class for MQTT publishers.

Architecture:
    MQTTConnection (connection lifecycle)
        ↓
    BasePublisher (abstract: JSON publish to one topic)
        ↓
    ShapeEventPublisher (concrete)

Responsibilities:
- Message publishing to one topic
- Publish statistics
- NOT responsible for: Message formatting (delegated to subclasses)
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt

from ..connection import MQTTConnection
from ..logging import StructuredLogger, LogEvent


class BasePublisher(MQTTConnection, ABC):
    """
    Abstract base class for MQTT publishers.

    Subclasses implement format_message(); publish() sends whatever dict
    it is given as JSON.

    Attributes:
        topic: MQTT topic to publish to
    """

    def __init__(
        self,
        broker_host: str,
        broker_port: int,
        topic: str,
        client_id: str,
        logger: StructuredLogger,
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
        self._message_count = 0

    @abstractmethod
    def format_message(self, *args, **kwargs) -> Dict[str, Any]:
        """
        Format message for publication.

        Returns:
            Dictionary ready for JSON serialization
        """
        raise NotImplementedError("Subclasses must implement format_message()")

    def publish(self, message_data: Dict[str, Any], retain: bool = False) -> bool:
        """
        Publish an already formatted message.

        Returns:
            True if handed to the broker, False if not connected or refused
        """
        if not self.is_connected():
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message="Cannot publish: not connected to broker"
            )
            return False

        try:
            payload = json.dumps(message_data)
        except (TypeError, ValueError) as e:
            self.logger.error(
                event=LogEvent.SERIALIZATION_ERROR,
                message="Message is not JSON serializable",
                exc_info=e
            )
            return False

        try:
            result = self.client.publish(self.topic, payload=payload, qos=self.qos, retain=retain)
        except ValueError as e:
            # paho rejects bad topics, qos values and oversized payloads
            self.logger.error(
                event=LogEvent.MQTT_PUBLISH_ERROR,
                message="Publish rejected by client",
                exc_info=e
            )
            return False

        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message=f"Publish failed ({mqtt.error_string(result.rc)})"
            )
            return False

        with self._stats_lock:
            self._message_count += 1
            count = self._message_count

        self.logger.debug(
            event=LogEvent.MQTT_PUBLISH_SUCCESS,
            message="Published message",
            metadata={'message_count': count, 'qos': self.qos, 'bytes': len(payload)}
        )
        return True

    def get_stats(self) -> Dict[str, Any]:
        """Connection status plus number of messages published."""
        with self._stats_lock:
            count = self._message_count
        return {**super().get_stats(), 'message_count': count, 'topic': self.topic}
