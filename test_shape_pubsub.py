"""
Test Shape Event Pub/Sub (Without Real Broker)
==============================================

Tests the full publish/subscribe flow of shape events without requiring
a real MQTT broker, by simulating message passing.

Usage:
    pytest test_shape_pubsub.py
"""

import json

import pytest

from mapsketch_draw import DrawEngine, ScriptedHostMap, ShapeKind
from mapsketch_mqtt import (
    LogEvent,
    ShapeEventMessage,
    ShapeEventPublisher,
    ShapeEventSubscriber,
    ShapeEventType,
    Timestamp,
    create_logger,
)

TOPIC = "mapsketch/shapes"


def draw_circle(engine, host, lng=127.0, lat=37.5):
    engine.select_mode(ShapeKind.CIRCLE)
    host.click(lng, lat)
    host.click(lng, lat)


def feature_by_id(message, shape_id):
    for feature in message.features["features"]:
        if feature["properties"]["id"] == shape_id:
            return feature
    return None


class FakeMQTTMessage:
    """Stand-in for paho's MQTTMessage (topic + bytes payload)."""

    def __init__(self, topic, payload):
        self.topic = topic
        self.payload = payload


def test_message_serialization():
    """Messages survive JSON serialization and deserialization."""
    print("\n" + "=" * 60)
    print("TEST: Message Serialization/Deserialization")
    print("=" * 60)

    logger = create_logger("test")
    publisher = ShapeEventPublisher(broker_host="localhost", topic=TOPIC, logger=logger)

    feature = {
        "type": "Feature",
        "properties": {"id": 7, "kind": "rectangle"},
        "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]]},
    }
    msg = ShapeEventMessage.for_shapes("map_01", ShapeEventType.CREATED, [feature])
    print(f"✓ Created ShapeEventMessage with {msg.shape_count} shapes")

    json_str = json.dumps(publisher.format_message(msg))
    reconstructed = ShapeEventMessage.from_dict(json.loads(json_str))
    print(f"✓ Round-tripped through JSON ({len(json_str)} bytes)")

    assert reconstructed.session_id == "map_01"
    assert reconstructed.event_type is ShapeEventType.CREATED
    assert reconstructed.shape_ids == [7]
    assert feature_by_id(reconstructed, 7) == feature
    assert feature_by_id(reconstructed, 8) is None
    assert reconstructed.timestamp == msg.timestamp


def test_deletion_message_has_no_features():
    msg = ShapeEventMessage.for_deletion("map_01", [1, 2])
    data = msg.to_dict()
    assert data["event_type"] == "deleted"
    assert data["shape_ids"] == [1, 2]
    assert data["features"] == {"type": "FeatureCollection", "features": []}
    assert ShapeEventMessage.from_dict(data).shape_count == 2


@pytest.mark.parametrize("overrides", [
    {"session_id": ""},
    {"shape_ids": []},
    {"event_type": "moved"},
    {"features": {"type": "Feature"}},
    {"features": {"type": "FeatureCollection", "features": []}},
    {"timestamp": "yesterday"},
    {"timestamp": "2026-10-19T15:30:45"},
    {"features": [1]},
    {"features": "x"},
    {"features": {"type": "FeatureCollection", "features": "x"}},
    {"features": {"type": "FeatureCollection", "features": [1]}},
])
def test_invalid_messages_are_rejected(overrides):
    data = {
        "schema_version": "1.0",
        "timestamp": Timestamp.now().value,
        "session_id": "map_01",
        "event_type": "created",
        "shape_ids": [1],
        "features": {"type": "FeatureCollection", "features": [{"properties": {"id": 1}}]},
    }
    data.update(overrides)
    with pytest.raises(ValueError):
        ShapeEventMessage.from_dict(data)


def test_missing_field_is_rejected():
    with pytest.raises(ValueError, match="Missing"):
        ShapeEventMessage.from_dict({"schema_version": "1.0"})


def test_publisher_attaches_to_engine():
    """Commits, replacements and removals become messages; app hooks still run."""
    logger = create_logger("test")
    publisher = ShapeEventPublisher(
        broker_host="localhost", topic=TOPIC, session_id="map_01", logger=logger
    )

    app_created = []
    host = ScriptedHostMap()
    engine = DrawEngine(host, on_shape_created=lambda shape, shape_id: app_created.append(shape_id))
    publisher.attach(engine)

    draw_circle(engine, host)
    draw_circle(engine, host, lng=127.1)
    engine.replace(1, engine.collection.get(2))
    engine.remove([2])

    assert app_created == [1, 2]
    assert [m.event_type for m in publisher.published] == [
        ShapeEventType.CREATED,
        ShapeEventType.CREATED,
        ShapeEventType.UPDATED,
        ShapeEventType.DELETED,
    ]
    created = publisher.published[0]
    assert created.session_id == "map_01"
    assert created.shape_ids == [1]
    assert feature_by_id(created, 1)["properties"]["kind"] == "circle"
    assert feature_by_id(publisher.published[2], 1)["properties"]["center"] == [127.1, 37.5]
    assert publisher.published[3].shape_ids == [2]

    # Not connected: nothing actually went out
    assert publisher.get_stats()["message_count"] == 0
    assert publisher.is_connected() is False


def test_subscriber_callbacks():
    """Subscriber deserializes and invokes its callback (simulated)."""
    print("\n" + "=" * 60)
    print("TEST: Subscriber Callbacks")
    print("=" * 60)

    logger = create_logger("test")
    received = []

    subscriber = ShapeEventSubscriber(
        broker_host="localhost",
        topic=TOPIC,
        on_shape_event=received.append,
        logger=logger,
    )
    print("✓ ShapeEventSubscriber created with callback")

    msg = ShapeEventMessage.for_deletion("map_01", [3])
    subscriber._on_message(None, None, FakeMQTTMessage(TOPIC, json.dumps(msg.to_dict()).encode("utf-8")))

    # Malformed payloads are counted and dropped
    subscriber._on_message(None, None, FakeMQTTMessage(TOPIC, b"{not json"))
    assert subscriber._handle_shape_event_message({"schema_version": "1.0"}) is None

    # Other topics are ignored
    subscriber._on_message(None, None, FakeMQTTMessage("other/topic", b"{}"))

    assert len(received) == 1
    assert received[0].shape_ids == [3]
    assert received[0].event_type is ShapeEventType.DELETED

    stats = subscriber.get_stats()
    assert stats["messages_received"] == 1
    assert stats["messages_rejected"] == 2
    print(f"✓ Subscriber stats: {stats}")


def test_subscriber_drops_malformed_features():
    """Payloads whose features are not a FeatureCollection mapping are rejected, not raised."""
    received = []
    subscriber = ShapeEventSubscriber(
        broker_host="localhost",
        topic=TOPIC,
        on_shape_event=received.append,
        logger=create_logger("test"),
    )
    data = ShapeEventMessage.for_deletion("map_01", [3]).to_dict()

    for features in ([1], "x", 42):
        payload = json.dumps({**data, "features": features}).encode("utf-8")
        subscriber._on_message(None, None, FakeMQTTMessage(TOPIC, payload))

    assert received == []
    assert subscriber.get_stats()["messages_rejected"] == 3


def test_publisher_history_is_bounded():
    publisher = ShapeEventPublisher(
        broker_host="localhost", topic=TOPIC, logger=create_logger("test"), history_size=2
    )
    for shape_id in (1, 2, 3):
        publisher.publish_shape_event(ShapeEventMessage.for_deletion("map_01", [shape_id]))

    assert len(publisher.published) == 2
    assert [m.shape_ids for m in publisher.published] == [[2], [3]]

    with pytest.raises(ValueError):
        ShapeEventPublisher(
            broker_host="localhost", topic=TOPIC, logger=create_logger("test"), history_size=0
        )


def test_end_to_end_without_broker():
    """What the publisher formats, the subscriber accepts."""
    logger = create_logger("test")
    publisher = ShapeEventPublisher(broker_host="localhost", topic=TOPIC, logger=logger)
    received = []
    subscriber = ShapeEventSubscriber(
        broker_host="localhost", topic=TOPIC, on_shape_event=received.append, logger=logger
    )

    host = ScriptedHostMap()
    engine = DrawEngine(host)
    publisher.attach(engine)

    engine.select_mode(ShapeKind.POLYGON)
    for point in [(0, 0), (1, 0), (1, 1)]:
        host.click(*point)
    host.double_click(1, 1)

    for msg in publisher.published:
        subscriber._handle_shape_event_message(json.loads(json.dumps(publisher.format_message(msg))))

    assert len(received) == 1
    ring = feature_by_id(received[0], 1)["geometry"]["coordinates"][0]
    assert ring == [[0, 0], [1, 0], [1, 1], [0, 0]]


class FakeClient:
    def __init__(self):
        self.subscriptions = []

    def subscribe(self, topic, qos=0):
        self.subscriptions.append((topic, qos))


def test_connect_callback_subscribes_and_tracks_state():
    subscriber = ShapeEventSubscriber(
        broker_host="localhost", topic=TOPIC, on_shape_event=lambda msg: None,
        logger=create_logger("test"), qos=1,
    )
    client = FakeClient()

    subscriber._on_connect(client, None, {}, 5)
    assert subscriber.is_connected() is False
    assert client.subscriptions == []

    subscriber._on_connect(client, None, {}, 0)
    assert subscriber.is_connected() is True
    assert client.subscriptions == [(TOPIC, 1)]

    subscriber._on_disconnect(client, None, {}, 7)
    assert subscriber.is_connected() is False
    assert subscriber.get_stats()["broker"] == "localhost:1883"


def test_publish_requires_connection():
    publisher = ShapeEventPublisher(broker_host="localhost", topic=TOPIC, logger=create_logger("test"))
    assert publisher.publish({"hello": "world"}) is False
    assert publisher.get_stats() == {
        "connected": False,
        "broker": "localhost:1883",
        "message_count": 0,
        "topic": TOPIC,
    }


def test_structured_logger_bound_context():
    logger = create_logger("test", run="r1")
    child = logger.bind(session_id="map_01")

    entry = child.render("INFO", LogEvent.SHAPE_CREATED, "Circle committed", {"shape_id": 1})

    assert entry["component"] == "test"
    assert entry["event"] == "shape.created"
    assert entry["metadata"] == {"run": "r1", "session_id": "map_01", "shape_id": 1}
    assert "metadata" not in create_logger("test").render("INFO", LogEvent.SHAPE_DELETED, "x")
    # Parent is unchanged
    assert logger.context == {"run": "r1"}


def test_structured_logger_error_entry():
    entry = create_logger("test").render(
        "ERROR", LogEvent.SCRIPT_ERROR, "replay failed", exc_info=ValueError("bad step")
    )
    assert entry["exception"] == {"type": "ValueError", "message": "bad step"}
