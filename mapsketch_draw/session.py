"""
Draw Session Module
===================

The single mutable state of a shape being drawn but not yet committed.

Design:
- One owned session object, passed explicitly into handlers
  (no shadow copies of state for callbacks)
- Mode-specific buffers as small mutable dataclasses
- Mutation rules live here; the state machine decides WHEN to apply them
- Buffer is None whenever mode is IDLE
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from mapsketch_draw.geometry.geodesy import Coordinate
from mapsketch_draw.geometry.shapes import ShapeKind


class Mode(str, Enum):
    """Draw mode (state of the state machine)."""
    IDLE = "idle"
    COLLECTING_POLYGON = "collecting_polygon"
    PLACING_CIRCLE = "placing_circle"
    DRAGGING_RECTANGLE = "dragging_rectangle"

    @classmethod
    def for_kind(cls, kind: ShapeKind) -> "Mode":
        return _MODE_BY_KIND[ShapeKind(kind)]

    @property
    def kind(self) -> Optional[ShapeKind]:
        for shape_kind, mode in _MODE_BY_KIND.items():
            if mode is self:
                return shape_kind
        return None


_MODE_BY_KIND = {
    ShapeKind.POLYGON: Mode.COLLECTING_POLYGON,
    ShapeKind.CIRCLE: Mode.PLACING_CIRCLE,
    ShapeKind.RECTANGLE: Mode.DRAGGING_RECTANGLE,
}


@dataclass
class PolygonBuffer:
    """Captured polygon vertices in click order."""
    vertices: List[Coordinate] = field(default_factory=list)


@dataclass
class CircleBuffer:
    """Circle center (None until first click) and working radius."""
    center: Optional[Coordinate] = None
    radius_m: float = 0.0


@dataclass
class RectangleBuffer:
    """Rectangle anchor (None until first click) and tracked opposite corner."""
    anchor: Optional[Coordinate] = None
    opposite: Optional[Coordinate] = None


Buffer = Union[PolygonBuffer, CircleBuffer, RectangleBuffer]


class DrawSession:
    """
    Mutable drawing session.

    Holds the current mode, the buffer for that mode and the cursor hint
    used by the polygon closing preview.

    Usage:
        session = DrawSession()
        session.start(Mode.COLLECTING_POLYGON)
        session.add_vertex(Coordinate(127.0, 37.5))
        session.clear()  # back to IDLE, buffer discarded
    """

    def __init__(self):
        self.mode: Mode = Mode.IDLE
        self.buffer: Optional[Buffer] = None
        self.cursor_hint: Optional[Coordinate] = None

    @property
    def is_idle(self) -> bool:
        return self.mode is Mode.IDLE

    def start(self, mode: Mode) -> None:
        """Enter `mode` with a fresh buffer, discarding any previous one."""
        self.clear()
        if mode is Mode.IDLE:
            return
        if mode is Mode.COLLECTING_POLYGON:
            self.buffer = PolygonBuffer()
        elif mode is Mode.PLACING_CIRCLE:
            self.buffer = CircleBuffer()
        elif mode is Mode.DRAGGING_RECTANGLE:
            self.buffer = RectangleBuffer()
        self.mode = mode

    def clear(self) -> None:
        """Discard the buffer and return to IDLE."""
        self.mode = Mode.IDLE
        self.buffer = None
        self.cursor_hint = None

    # ===== Polygon =====

    @property
    def vertices(self) -> List[Coordinate]:
        if isinstance(self.buffer, PolygonBuffer):
            return self.buffer.vertices
        return []

    def add_vertex(self, point: Coordinate) -> None:
        self._require(PolygonBuffer).vertices.append(point)

    def set_cursor_hint(self, point: Optional[Coordinate]) -> None:
        self.cursor_hint = point

    # ===== Circle =====

    def set_center(self, point: Coordinate, radius_m: float) -> None:
        buffer = self._require(CircleBuffer)
        buffer.center = point
        buffer.radius_m = radius_m

    def adjust_radius(self, delta_m: float, min_radius_m: float) -> float:
        """Add delta_m to the working radius, clamped to min_radius_m."""
        buffer = self._require(CircleBuffer)
        buffer.radius_m = max(min_radius_m, buffer.radius_m + delta_m)
        return buffer.radius_m

    # ===== Rectangle =====

    def set_anchor(self, point: Coordinate) -> None:
        buffer = self._require(RectangleBuffer)
        buffer.anchor = point
        buffer.opposite = point

    def set_opposite(self, point: Coordinate) -> None:
        self._require(RectangleBuffer).opposite = point

    def _require(self, buffer_type):
        if not isinstance(self.buffer, buffer_type):
            raise TypeError(
                f"Session in mode {self.mode.value} has no {buffer_type.__name__}"
            )
        return self.buffer

    def __repr__(self) -> str:
        return f"DrawSession(mode={self.mode.value}, buffer={self.buffer!r})"
