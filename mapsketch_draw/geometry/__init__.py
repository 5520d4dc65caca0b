"""
Geometry Layer
==============

Bounded Context: Pure geometry on longitude/latitude.

Responsibilities:
- Coordinate representation (immutable)
- Haversine distance
- Circle and rectangle tessellation into closed rings
- Committed shape value objects
- NO session state, NO events, NO rendering

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Fail-fast validation
"""

from mapsketch_draw.geometry.geodesy import (
    Coordinate,
    haversine_distance_meters,
    circle_to_ring,
    rectangle_to_ring,
    ring_to_array,
)
from mapsketch_draw.geometry.shapes import (
    ShapeKind,
    Shape,
    PolygonShape,
    CircleShape,
    RectangleShape,
)

__all__ = [
    "Coordinate",
    "haversine_distance_meters",
    "circle_to_ring",
    "rectangle_to_ring",
    "ring_to_array",
    "ShapeKind",
    "Shape",
    "PolygonShape",
    "CircleShape",
    "RectangleShape",
]
