"""
Committed Shapes Module
=======================

Immutable shapes produced by a finished drawing session.

Design:
- Frozen dataclasses (value objects, no identity)
- Fail-fast validation in __post_init__
- Every shape can tessellate itself into a closed ring
- GeoJSON geometry export (single outer ring, no holes)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

from mapsketch_draw.geometry.geodesy import (
    Coordinate,
    DEFAULT_CIRCLE_STEPS,
    circle_to_ring,
    rectangle_to_ring,
)

MIN_CIRCLE_RADIUS_M = 20.0


class ShapeKind(str, Enum):
    """Shape kind enumeration (also the toolbar mode names)."""
    POLYGON = "polygon"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"


def _ring_coordinates(ring: List[Coordinate]) -> List[List[float]]:
    return [c.to_list() for c in ring]


@dataclass(frozen=True)
class PolygonShape:
    """
    Closed polygon ring.

    Attributes:
        ring: Coordinates with first == last

    Invariants:
        - At least 4 points (3 distinct vertices + closing point)
        - ring[0] == ring[-1]
    """

    ring: Tuple[Coordinate, ...]

    def __post_init__(self):
        """Validate ring."""
        object.__setattr__(self, "ring", tuple(self.ring))
        if len(self.ring) < 4:
            raise ValueError(f"Polygon ring needs at least 4 points, got {len(self.ring)}")
        if self.ring[0] != self.ring[-1]:
            raise ValueError("Polygon ring must be closed (first == last)")

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.POLYGON

    def to_ring(self, steps: int = DEFAULT_CIRCLE_STEPS) -> List[Coordinate]:
        return list(self.ring)

    def to_geometry(self, steps: int = DEFAULT_CIRCLE_STEPS) -> Dict[str, Any]:
        return {"type": "Polygon", "coordinates": [_ring_coordinates(self.to_ring(steps))]}

    def properties(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class CircleShape:
    """
    Circle given by center and radius.

    Attributes:
        center: Circle center
        radius_meters: Radius in meters (>= 20)
    """

    center: Coordinate
    radius_meters: float

    def __post_init__(self):
        """Validate radius."""
        if self.radius_meters < MIN_CIRCLE_RADIUS_M:
            raise ValueError(
                f"Circle radius must be >= {MIN_CIRCLE_RADIUS_M} m, got {self.radius_meters}"
            )

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.CIRCLE

    def to_ring(self, steps: int = DEFAULT_CIRCLE_STEPS) -> List[Coordinate]:
        return circle_to_ring(self.center, self.radius_meters, steps)

    def to_geometry(self, steps: int = DEFAULT_CIRCLE_STEPS) -> Dict[str, Any]:
        return {"type": "Polygon", "coordinates": [_ring_coordinates(self.to_ring(steps))]}

    def properties(self) -> Dict[str, Any]:
        return {"center": self.center.to_list(), "radius_m": self.radius_meters}


@dataclass(frozen=True)
class RectangleShape:
    """
    Axis-aligned rectangle given by two opposite corners.

    Attributes:
        corner1: Anchor corner (first click)
        corner2: Opposite corner (double click)
    """

    corner1: Coordinate
    corner2: Coordinate

    @property
    def kind(self) -> ShapeKind:
        return ShapeKind.RECTANGLE

    def to_ring(self, steps: int = DEFAULT_CIRCLE_STEPS) -> List[Coordinate]:
        return rectangle_to_ring(self.corner1, self.corner2)

    def to_geometry(self, steps: int = DEFAULT_CIRCLE_STEPS) -> Dict[str, Any]:
        return {"type": "Polygon", "coordinates": [_ring_coordinates(self.to_ring(steps))]}

    def properties(self) -> Dict[str, Any]:
        return {}


Shape = Union[PolygonShape, CircleShape, RectangleShape]
