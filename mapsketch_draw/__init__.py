"""
MapSketch Draw Engine v1.0
==========================

Bounded Context: Interactive shape drawing on a lng/lat map.

Design Philosophy:
- Separation of Concerns: Geometry, Session, Input, Rendering separated
- One owned mutable session, one dispatch table per mode
- Host map is injected (on/off interface), never reached for globally
- Pure projections: preview and exported geometry are recomputed from state

Architecture:

    mapsketch_draw/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── geodesy.py     # Coordinate, haversine, circle/rectangle rings
    │   └── shapes.py      # PolygonShape, CircleShape, RectangleShape
    │
    ├── session.py         # DrawSession (mode + buffer, mutable)
    ├── state_machine.py   # DrawModeStateMachine (what each event does)
    ├── input_adapter.py   # InputEventAdapter (host subscriptions)
    ├── collection.py      # ShapeCollection (committed shapes, GeoJSON)
    ├── preview.py         # PreviewProjector (live preview, GeoJSON)
    ├── engine.py          # DrawEngine (facade)
    │
    └── rendering/         # Snapshot drawing onto numpy frames

Usage:

    from mapsketch_draw import DrawEngine, ScriptedHostMap, ShapeKind

    host = ScriptedHostMap()
    engine = DrawEngine(host, on_shape_created=lambda shape, shape_id: print(shape_id))

    engine.select_mode(ShapeKind.POLYGON)
    host.click(127.000, 37.500)
    host.click(127.010, 37.500)
    host.click(127.010, 37.510)
    host.double_click(127.010, 37.510)

    geojson = engine.get_committed_geometry(ShapeKind.POLYGON)
"""

# Geometry Layer (immutable, stateless)
from mapsketch_draw.geometry import (
    Coordinate,
    haversine_distance_meters,
    circle_to_ring,
    rectangle_to_ring,
    ShapeKind,
    PolygonShape,
    CircleShape,
    RectangleShape,
)

# Errors and configuration
from mapsketch_draw.errors import (
    DrawError,
    ValidationError,
    MalformedInputEvent,
    InvariantViolation,
)
from mapsketch_draw.config import DrawConfig

# Session & state machine (stateful)
from mapsketch_draw.events import EventType, PointerEvent
from mapsketch_draw.session import DrawSession, Mode
from mapsketch_draw.state_machine import DrawModeStateMachine

# Host integration
from mapsketch_draw.host import HostMap, ScriptedHostMap
from mapsketch_draw.input_adapter import InputEventAdapter

# Projections
from mapsketch_draw.collection import ShapeCollection
from mapsketch_draw.preview import PreviewProjector

# Facade
from mapsketch_draw.engine import DrawEngine

__all__ = [
    # Geometry
    "Coordinate",
    "haversine_distance_meters",
    "circle_to_ring",
    "rectangle_to_ring",
    "ShapeKind",
    "PolygonShape",
    "CircleShape",
    "RectangleShape",
    # Errors / config
    "DrawError",
    "ValidationError",
    "MalformedInputEvent",
    "InvariantViolation",
    "DrawConfig",
    # Session
    "EventType",
    "PointerEvent",
    "DrawSession",
    "Mode",
    "DrawModeStateMachine",
    # Host
    "HostMap",
    "ScriptedHostMap",
    "InputEventAdapter",
    # Projections
    "ShapeCollection",
    "PreviewProjector",
    # Facade
    "DrawEngine",
]

__version__ = "1.0.0"
