"""
Test DrawModeStateMachine
=========================

Transition table, commit rules and the four reference drawing scenarios.
"""

import pytest

from mapsketch_draw import (
    CircleShape,
    Coordinate,
    DrawConfig,
    DrawModeStateMachine,
    DrawSession,
    EventType,
    InvariantViolation,
    Mode,
    PointerEvent,
    PolygonShape,
    RectangleShape,
    ShapeCollection,
    ShapeKind,
    ValidationError,
)


def make_machine(config=None):
    created = []
    collection = ShapeCollection(on_shape_created=lambda shape, shape_id: created.append((shape_id, shape)))
    machine = DrawModeStateMachine(DrawSession(), collection, config)
    return machine, collection, created


def click(lng, lat):
    return PointerEvent(EventType.PRIMARY_CLICK, Coordinate(lng, lat))


def double_click(lng, lat):
    return PointerEvent(EventType.DOUBLE_CLICK, Coordinate(lng, lat))


def move(lng, lat):
    return PointerEvent(EventType.POINTER_MOVE, Coordinate(lng, lat))


def wheel(delta, lng=0.0, lat=0.0):
    return PointerEvent(EventType.WHEEL, Coordinate(lng, lat), delta=delta)


# ===== Reference scenarios =====

def test_scenario_polygon_commit():
    machine, collection, created = make_machine()
    machine.select_mode(ShapeKind.POLYGON)

    assert machine.handle(click(127.000, 37.500))
    assert machine.handle(click(127.010, 37.500))
    assert machine.handle(click(127.010, 37.510))
    assert machine.handle(double_click(127.010, 37.510))

    assert len(created) == 1
    shape_id, shape = created[0]
    assert isinstance(shape, PolygonShape)
    assert list(shape.ring) == [
        Coordinate(127.000, 37.500),
        Coordinate(127.010, 37.500),
        Coordinate(127.010, 37.510),
        Coordinate(127.000, 37.500),
    ]
    assert machine.mode is Mode.IDLE
    assert collection.ids() == [shape_id]


def test_scenario_circle_wheel_and_commit():
    machine, collection, created = make_machine()
    machine.select_mode(ShapeKind.CIRCLE)

    machine.handle(click(127.000, 37.500))
    assert machine.session.buffer.center == Coordinate(127.000, 37.500)
    assert machine.session.buffer.radius_m == 100

    machine.handle(wheel(+1))
    assert machine.session.buffer.radius_m == 120

    machine.handle(wheel(-1))
    machine.handle(wheel(-1))
    assert machine.session.buffer.radius_m == 80

    machine.handle(click(130.0, 40.0))

    assert len(created) == 1
    _, shape = created[0]
    assert isinstance(shape, CircleShape)
    assert shape.radius_meters == 80
    assert shape.center == Coordinate(127.000, 37.500)
    assert machine.mode is Mode.IDLE


def test_scenario_rectangle_drag():
    machine, collection, created = make_machine()
    machine.select_mode(ShapeKind.RECTANGLE)

    machine.handle(click(127.000, 37.500))
    machine.handle(move(127.010, 37.510))
    assert machine.session.buffer.opposite == Coordinate(127.010, 37.510)
    machine.handle(double_click(127.020, 37.520))

    assert len(created) == 1
    _, shape = created[0]
    assert isinstance(shape, RectangleShape)
    assert shape.corner1 == Coordinate(127.000, 37.500)
    assert shape.corner2 == Coordinate(127.020, 37.520)
    assert machine.mode is Mode.IDLE


def test_scenario_polygon_too_few_points():
    machine, collection, created = make_machine()
    machine.select_mode(ShapeKind.POLYGON)
    machine.handle(click(127.0, 37.5))

    with pytest.raises(ValidationError):
        machine.handle(double_click(127.0, 37.5))

    assert created == []
    assert len(collection) == 0
    assert machine.mode is Mode.COLLECTING_POLYGON
    assert machine.session.vertices == [Coordinate(127.0, 37.5)]


# ===== Properties =====

def test_polygon_with_two_vertices_is_rejected_without_mutation():
    machine, collection, _ = make_machine()
    machine.select_mode(ShapeKind.POLYGON)
    machine.handle(click(0, 0))
    machine.handle(click(1, 0))

    with pytest.raises(ValidationError):
        machine.handle(double_click(1, 0))

    assert len(collection) == 0
    assert machine.mode is Mode.COLLECTING_POLYGON
    assert len(machine.session.vertices) == 2


def test_polygon_duplicate_clicks_do_not_count_as_vertices():
    machine, collection, _ = make_machine()
    machine.select_mode(ShapeKind.POLYGON)
    for _ in range(3):
        machine.handle(click(0, 0))
    machine.handle(click(1, 0))

    with pytest.raises(ValidationError):
        machine.handle(double_click(1, 0))
    assert len(collection) == 0


def test_polygon_with_three_vertices_commits_closed_ring():
    machine, collection, _ = make_machine()
    machine.select_mode(ShapeKind.POLYGON)
    for point in [(0, 0), (1, 0), (1, 1)]:
        machine.handle(click(*point))
    machine.handle(double_click(1, 1))

    fc = collection.to_feature_collection(ShapeKind.POLYGON)
    assert len(fc["features"]) == 1
    ring = fc["features"][0]["geometry"]["coordinates"][0]
    assert ring[0] == ring[-1]
    assert len(ring) == 4


def test_wheel_sequence_keeps_radius_bounded_and_stepped():
    machine, _, _ = make_machine()
    machine.select_mode(ShapeKind.CIRCLE)
    machine.handle(click(0, 0))

    deltas = [1, -1, -1, -1, -1, -1, -1, 3, 1, -2, -0.5, 7]
    radius = machine.session.buffer.radius_m
    for delta in deltas:
        machine.handle(wheel(delta))
        new_radius = machine.session.buffer.radius_m
        expected = max(20, radius + (20 if delta > 0 else -20))
        assert new_radius == expected
        assert new_radius >= 20
        radius = new_radius


def test_wheel_before_center_is_ignored():
    machine, _, _ = make_machine()
    machine.select_mode(ShapeKind.CIRCLE)
    assert machine.handle(wheel(1)) is False
    assert machine.session.buffer.radius_m == 0.0


def test_zero_wheel_delta_shrinks_radius():
    machine, _, _ = make_machine()
    machine.select_mode(ShapeKind.CIRCLE)
    machine.handle(click(0, 0))
    assert machine.handle(wheel(0)) is True
    assert machine.session.buffer.radius_m == 80


def test_polygon_move_hint_needs_two_vertices():
    machine, _, _ = make_machine()
    machine.select_mode(ShapeKind.POLYGON)
    machine.handle(click(0, 0))

    assert machine.handle(move(0.5, 0.5)) is False
    assert machine.session.cursor_hint is None

    machine.handle(click(1, 0))
    assert machine.handle(move(0.5, 0.5)) is True
    assert machine.session.cursor_hint == Coordinate(0.5, 0.5)


def test_rectangle_events_before_anchor_are_ignored():
    machine, collection, _ = make_machine()
    machine.select_mode(ShapeKind.RECTANGLE)

    assert machine.handle(move(1, 1)) is False
    assert machine.handle(double_click(1, 1)) is False
    assert len(collection) == 0
    assert machine.mode is Mode.DRAGGING_RECTANGLE


def test_rectangle_second_click_is_ignored():
    machine, _, _ = make_machine()
    machine.select_mode(ShapeKind.RECTANGLE)
    machine.handle(click(0, 0))
    assert machine.handle(click(5, 5)) is False
    assert machine.session.buffer.anchor == Coordinate(0, 0)


def test_events_in_idle_are_ignored():
    machine, collection, _ = make_machine()
    for event in (click(0, 0), double_click(0, 0), move(0, 0), wheel(1)):
        assert machine.handle(event) is False
    assert machine.mode is Mode.IDLE
    assert len(collection) == 0


def test_unsubscribed_event_kinds_are_ignored_per_mode():
    machine, _, _ = make_machine()
    machine.select_mode(ShapeKind.POLYGON)
    assert machine.handle(wheel(1)) is False

    machine.select_mode(ShapeKind.CIRCLE)
    machine.handle(click(0, 0))
    assert machine.handle(double_click(0, 0)) is False
    assert machine.handle(move(1, 1)) is False
    assert machine.mode is Mode.PLACING_CIRCLE


def test_mode_switch_discards_buffer():
    machine, collection, _ = make_machine()
    machine.select_mode(ShapeKind.POLYGON)
    machine.handle(click(0, 0))
    machine.handle(click(1, 0))

    machine.select_mode(ShapeKind.RECTANGLE)
    assert machine.mode is Mode.DRAGGING_RECTANGLE
    assert machine.session.vertices == []

    machine.select_mode(ShapeKind.POLYGON)
    assert machine.session.vertices == []
    assert len(collection) == 0


def test_cancel():
    machine, _, _ = make_machine()
    assert machine.cancel() is False

    machine.select_mode(ShapeKind.CIRCLE)
    machine.handle(click(0, 0))
    assert machine.cancel() is True
    assert machine.mode is Mode.IDLE


def test_finish_commits_each_kind():
    machine, collection, _ = make_machine()

    machine.select_mode(ShapeKind.POLYGON)
    for point in [(0, 0), (1, 0), (1, 1)]:
        machine.handle(click(*point))
    assert machine.finish() == 1

    machine.select_mode(ShapeKind.CIRCLE)
    machine.handle(click(0, 0))
    assert machine.finish() == 2

    machine.select_mode(ShapeKind.RECTANGLE)
    machine.handle(click(0, 0))
    machine.handle(move(2, 2))
    assert machine.finish() == 3
    assert collection.get(3) == RectangleShape(Coordinate(0, 0), Coordinate(2, 2))
    assert machine.mode is Mode.IDLE


def test_finish_with_nothing_to_commit():
    machine, collection, _ = make_machine()

    with pytest.raises(InvariantViolation):
        machine.finish()

    machine.select_mode(ShapeKind.POLYGON)
    with pytest.raises(InvariantViolation):
        machine.finish()

    machine.select_mode(ShapeKind.CIRCLE)
    with pytest.raises(InvariantViolation):
        machine.finish()
    assert machine.mode is Mode.PLACING_CIRCLE

    machine.select_mode(ShapeKind.RECTANGLE)
    with pytest.raises(InvariantViolation):
        machine.finish()
    assert len(collection) == 0


def test_config_drives_circle_constants():
    config = DrawConfig(default_radius_m=200, radius_step_m=50, min_radius_m=100)
    machine, _, created = make_machine(config)
    machine.select_mode(ShapeKind.CIRCLE)
    machine.handle(click(0, 0))
    assert machine.session.buffer.radius_m == 200

    machine.handle(wheel(-1))
    machine.handle(wheel(-1))
    machine.handle(wheel(-1))
    assert machine.session.buffer.radius_m == 100

    machine.handle(click(0, 0))
    assert created[0][1].radius_meters == 100


def test_commit_hook_sees_idle_session():
    session = DrawSession()
    modes = []
    collection = ShapeCollection(on_shape_created=lambda shape, shape_id: modes.append(session.mode))
    machine = DrawModeStateMachine(session, collection)

    machine.select_mode(ShapeKind.CIRCLE)
    machine.handle(click(0, 0))
    machine.handle(click(0, 0))

    assert modes == [Mode.IDLE]


def test_polygon_double_click_without_vertices_is_a_validation_error():
    machine, collection, _ = make_machine()
    machine.select_mode(ShapeKind.POLYGON)

    with pytest.raises(ValidationError):
        machine.handle(double_click(0, 0))
    assert machine.mode is Mode.COLLECTING_POLYGON
    assert len(collection) == 0
