"""
MQTT Connection
===============

Bounded Context: MQTT Infrastructure

Connection lifecycle shared by publishers and subscribers.

Design:
- paho-mqtt 2.x client (CallbackAPIVersion.VERSION2 callbacks)
- Background network loop (loop_start), connected flag as threading.Event
- on_connected() hook for subclasses (e.g. subscribe after (re)connect)
- Every broker interaction logged through StructuredLogger
"""

import threading
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt

from .logging import LogEvent, StructuredLogger


class MQTTConnection:
    """
    Owns one paho client and its connection state.

    Attributes:
        broker_host, broker_port: Broker address
        client_id: MQTT client identifier
        qos: Quality of Service used by subclasses
        client: paho-mqtt client
        logger: Structured logger, bound to the broker address
    """

    def __init__(
        self,
        broker_host: str,
        broker_port: int,
        client_id: str,
        logger: StructuredLogger,
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 0
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.client_id = client_id
        self.qos = qos
        self.logger = logger.bind(broker=self.broker_address, client_id=client_id)

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        if username and password:
            self.client.username_pw_set(username, password)
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self._connected = threading.Event()
        self._stats_lock = threading.Lock()

    @property
    def broker_address(self) -> str:
        return f"{self.broker_host}:{self.broker_port}"

    def on_connected(self, client: mqtt.Client) -> None:
        """Hook run after every successful (re)connect."""

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None
    ) -> None:
        if reason_code != 0:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Broker refused connection ({reason_code})",
            )
            return

        self._connected.set()
        self.on_connected(client)
        self.logger.info(event=LogEvent.MQTT_CONNECTED, message="Connected to MQTT broker")

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None
    ) -> None:
        self._connected.clear()
        self.logger.warning(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Disconnected from MQTT broker",
            metadata={'reason_code': str(reason_code)}
        )

    def connect(self, timeout: float = 10.0) -> bool:
        """
        Connect and start the network loop.

        Returns:
            True once the broker acknowledged within `timeout` seconds
        """
        try:
            self.client.connect(self.broker_host, self.broker_port)
        except (OSError, ValueError) as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Failed to connect to broker",
                exc_info=e,
            )
            return False

        self.client.loop_start()
        if self._connected.wait(timeout=timeout):
            return True

        self.client.loop_stop()
        self.logger.error(
            event=LogEvent.MQTT_CONNECTION_ERROR,
            message="Connection timeout",
            metadata={'timeout': timeout}
        )
        return False

    def disconnect(self) -> None:
        """Stop the network loop and close the connection."""
        self.client.loop_stop()
        self.client.disconnect()
        self._connected.clear()
        self.logger.info(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Disconnected from broker",
            metadata=self.get_stats()
        )

    def is_connected(self) -> bool:
        return self._connected.is_set()

    def get_stats(self) -> Dict[str, Any]:
        return {
            'connected': self._connected.is_set(),
            'broker': self.broker_address,
        }
