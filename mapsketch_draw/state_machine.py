"""
Draw Mode State Machine
=======================

Governs which input does what in which mode.

States:
    IDLE
    COLLECTING_POLYGON   clicks append vertices, double click commits
    PLACING_CIRCLE       first click sets center, wheel resizes, second click commits
    DRAGGING_RECTANGLE   first click sets anchor, move tracks corner, double click commits

Design:
- One dispatch table keyed by (Mode, EventType)
- Pairs missing from the table are ignored (not consumed, no mutation)
- The session is the only mutable state and is mutated only here
- Every commit returns the machine to IDLE
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from mapsketch_draw.collection import ShapeCollection
from mapsketch_draw.config import DrawConfig
from mapsketch_draw.errors import InvariantViolation, ValidationError
from mapsketch_draw.events import EventType, PointerEvent
from mapsketch_draw.geometry.geodesy import Coordinate
from mapsketch_draw.geometry.shapes import (
    CircleShape,
    PolygonShape,
    RectangleShape,
    ShapeKind,
)
from mapsketch_draw.session import (
    CircleBuffer,
    DrawSession,
    Mode,
    PolygonBuffer,
    RectangleBuffer,
)

logger = logging.getLogger(__name__)

Handler = Callable[[PointerEvent], bool]


class DrawModeStateMachine:
    """
    Canonical drawing state machine.

    Usage:
        machine = DrawModeStateMachine(DrawSession(), ShapeCollection())
        machine.select_mode(ShapeKind.POLYGON)
        machine.handle(PointerEvent(EventType.PRIMARY_CLICK, Coordinate(127.0, 37.5)))
        ...
        machine.handle(PointerEvent(EventType.DOUBLE_CLICK, Coordinate(127.0, 37.5)))

    handle() returns True when the event was consumed. A polygon double
    click with too few vertices raises ValidationError and leaves the
    session untouched.
    """

    def __init__(
        self,
        session: DrawSession,
        collection: ShapeCollection,
        config: Optional[DrawConfig] = None,
    ):
        self.session = session
        self.collection = collection
        self.config = config or DrawConfig()

        self._handlers: Dict[Tuple[Mode, EventType], Handler] = {
            (Mode.COLLECTING_POLYGON, EventType.PRIMARY_CLICK): self._polygon_click,
            (Mode.COLLECTING_POLYGON, EventType.POINTER_MOVE): self._polygon_move,
            (Mode.COLLECTING_POLYGON, EventType.DOUBLE_CLICK): self._polygon_double_click,
            (Mode.PLACING_CIRCLE, EventType.PRIMARY_CLICK): self._circle_click,
            (Mode.PLACING_CIRCLE, EventType.WHEEL): self._circle_wheel,
            (Mode.DRAGGING_RECTANGLE, EventType.PRIMARY_CLICK): self._rectangle_click,
            (Mode.DRAGGING_RECTANGLE, EventType.POINTER_MOVE): self._rectangle_move,
            (Mode.DRAGGING_RECTANGLE, EventType.DOUBLE_CLICK): self._rectangle_double_click,
        }

    @property
    def mode(self) -> Mode:
        return self.session.mode

    # ===== Mode control =====

    def select_mode(self, kind: ShapeKind) -> Mode:
        """Start a fresh session for `kind`, discarding any unfinished one."""
        mode = Mode.for_kind(kind)
        if not self.session.is_idle:
            logger.info(f"🔄 Discarding unfinished {self.session.mode.value} session")
        self.session.start(mode)
        logger.info(f"✏️ Mode selected: {mode.value}")
        return mode

    def cancel(self) -> bool:
        """
        Discard the current session.

        Returns:
            True if a session was active, False if already IDLE
        """
        if self.session.is_idle:
            return False
        logger.info(f"🛑 Cancelled {self.session.mode.value} session")
        self.session.clear()
        return True

    def handle(self, event: PointerEvent) -> bool:
        """Dispatch one event against the current mode."""
        handler = self._handlers.get((self.session.mode, event.event_type))
        if handler is None:
            logger.debug(
                f"Ignoring {event.event_type.value} in mode {self.session.mode.value}"
            )
            return False
        return handler(event)

    def finish(self) -> int:
        """
        Commit the active session as its finalising event would.

        Returns:
            Id of the committed shape

        Raises:
            InvariantViolation: Nothing to commit (IDLE, or no center/anchor yet)
            ValidationError: Polygon has too few vertices
        """
        buffer = self.session.buffer
        if isinstance(buffer, PolygonBuffer):
            if not buffer.vertices:
                raise InvariantViolation("Cannot commit polygon: no vertices captured")
            return self._commit_polygon()
        if isinstance(buffer, CircleBuffer):
            return self._commit_circle()
        if isinstance(buffer, RectangleBuffer):
            return self._commit_rectangle(buffer.opposite)
        raise InvariantViolation("Nothing to finish: no drawing session is active")

    # ===== Polygon =====

    def _polygon_click(self, event: PointerEvent) -> bool:
        self.session.add_vertex(event.coordinate)
        return True

    def _polygon_move(self, event: PointerEvent) -> bool:
        # Closing preview only makes sense once there is a segment
        if len(self.session.vertices) < 2:
            return False
        self.session.set_cursor_hint(event.coordinate)
        return True

    def _polygon_double_click(self, event: PointerEvent) -> bool:
        self._commit_polygon()
        return True

    def _commit_polygon(self) -> int:
        vertices = list(self.session.vertices)
        distinct = len(set(vertices))
        required = self.config.min_polygon_vertices
        if distinct < required:
            logger.warning(
                f"⚠️ Polygon needs at least {required} points, got {distinct}"
            )
            raise ValidationError(
                f"A polygon needs at least {required} distinct points, got {distinct}"
            )

        shape = PolygonShape(ring=tuple(vertices + [vertices[0]]))
        return self._commit(shape)

    # ===== Circle =====

    def _circle_click(self, event: PointerEvent) -> bool:
        if self.session.buffer.center is None:
            self.session.set_center(event.coordinate, self.config.default_radius_m)
            return True
        # Second click commits; its position is irrelevant
        self._commit_circle()
        return True

    def _circle_wheel(self, event: PointerEvent) -> bool:
        if self.session.buffer.center is None:
            return False
        step = self.config.radius_step_m if event.delta > 0 else -self.config.radius_step_m
        radius = self.session.adjust_radius(step, self.config.min_radius_m)
        logger.debug(f"Circle radius: {radius:.0f} m")
        return True

    def _commit_circle(self) -> int:
        buffer = self.session.buffer
        if not isinstance(buffer, CircleBuffer) or buffer.center is None:
            raise InvariantViolation("Cannot commit circle: no center placed")
        shape = CircleShape(center=buffer.center, radius_meters=buffer.radius_m)
        return self._commit(shape)

    # ===== Rectangle =====

    def _rectangle_click(self, event: PointerEvent) -> bool:
        if self.session.buffer.anchor is not None:
            return False
        self.session.set_anchor(event.coordinate)
        return True

    def _rectangle_move(self, event: PointerEvent) -> bool:
        if self.session.buffer.anchor is None:
            return False
        self.session.set_opposite(event.coordinate)
        return True

    def _rectangle_double_click(self, event: PointerEvent) -> bool:
        if self.session.buffer.anchor is None:
            return False
        self._commit_rectangle(event.coordinate)
        return True

    def _commit_rectangle(self, corner: Optional[Coordinate]) -> int:
        buffer = self.session.buffer
        if not isinstance(buffer, RectangleBuffer) or buffer.anchor is None or corner is None:
            raise InvariantViolation("Cannot commit rectangle: no anchor placed")
        shape = RectangleShape(corner1=buffer.anchor, corner2=corner)
        return self._commit(shape)

    # ===== Commit =====

    def _commit(self, shape) -> int:
        self.session.clear()
        return self.collection.commit(shape)
