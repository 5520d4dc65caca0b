"""
Draw Engine
===========

Facade the host application talks to. Wires together:

    host events -> InputEventAdapter -> DrawModeStateMachine -> DrawSession
                                               |
                              ShapeCollection <-+-> PreviewProjector

and exposes mode selection (toolbar), geometry getters (render layer)
and shape notifications (application).
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from mapsketch_draw.collection import DeleteCallback, ShapeCallback, ShapeCollection
from mapsketch_draw.config import DrawConfig
from mapsketch_draw.errors import ValidationError
from mapsketch_draw.events import PointerEvent
from mapsketch_draw.geometry.shapes import Shape, ShapeKind
from mapsketch_draw.host import HostMap
from mapsketch_draw.input_adapter import InputEventAdapter
from mapsketch_draw.preview import PreviewProjector
from mapsketch_draw.session import DrawSession, Mode
from mapsketch_draw.state_machine import DrawModeStateMachine

logger = logging.getLogger(__name__)


class DrawEngine:
    """
    Interactive drawing engine bound to one host map.

    Usage:
        engine = DrawEngine(
            host,
            on_shape_created=lambda shape, shape_id: ...,
            on_preview_changed=render_preview,
        )
        engine.select_mode(ShapeKind.CIRCLE)
        # ... host delivers clicks / wheel events ...
        engine.get_committed_geometry(ShapeKind.CIRCLE)
        engine.teardown()

    Host event handlers are only registered while a mode is active.
    """

    def __init__(
        self,
        host: HostMap,
        config: Optional[DrawConfig] = None,
        on_shape_created: Optional[ShapeCallback] = None,
        on_shape_updated: Optional[ShapeCallback] = None,
        on_shape_deleted: Optional[DeleteCallback] = None,
        on_validation_error: Optional[Callable[[ValidationError], None]] = None,
        on_preview_changed: Optional[Callable[[Dict[str, Any]], None]] = None,
    ):
        """
        Args:
            host: Host map (on/off event interface)
            config: Drawing configuration (defaults if None)
            on_shape_created: Called with (shape, id) after a commit
            on_shape_updated: Called with (shape, id) after replace()
            on_shape_deleted: Called with removed ids after remove()
            on_validation_error: Called when a finalise attempt is rejected
            on_preview_changed: Called with the fresh preview after each change
        """
        self.config = config or DrawConfig()
        self.session = DrawSession()
        self.collection = ShapeCollection(
            circle_steps=self.config.circle_steps,
            on_shape_created=on_shape_created,
            on_shape_updated=on_shape_updated,
            on_shape_deleted=on_shape_deleted,
        )
        self.machine = DrawModeStateMachine(self.session, self.collection, self.config)
        self.projector = PreviewProjector(self.config)
        self.adapter = InputEventAdapter(
            host,
            dispatch=self.handle_event,
            cursor_style=self.config.cursor_style,
        )
        self.on_validation_error = on_validation_error
        self.on_preview_changed = on_preview_changed
        self._torn_down = False

    @property
    def mode(self) -> Mode:
        return self.session.mode

    # ===== Toolbar entry points =====

    def select_mode(self, kind: ShapeKind) -> Mode:
        """
        Start drawing a shape of `kind`.

        Any unfinished session is discarded first.

        Raises:
            RuntimeError: If the engine was torn down
            ValueError: If kind is not a known shape kind
        """
        if self._torn_down:
            raise RuntimeError("DrawEngine has been torn down")
        mode = self.machine.select_mode(kind)
        self.adapter.activate(mode)
        self._notify_preview()
        return mode

    def cancel(self) -> bool:
        """Discard the current session. Returns False if nothing was active."""
        discarded = self.machine.cancel()
        self.adapter.deactivate()
        if discarded:
            self._notify_preview()
        return discarded

    def finish(self) -> Optional[int]:
        """
        Commit the current session without a pointer event.

        Returns:
            Id of the new shape, or None if the polygon was rejected
            (reported through on_validation_error)

        Raises:
            InvariantViolation: Nothing to commit
        """
        try:
            shape_id = self.machine.finish()
        except ValidationError as e:
            self._report_validation_error(e)
            return None
        self._sync()
        return shape_id

    def teardown(self) -> None:
        """Unsubscribe from the host and drop the session. Idempotent."""
        self.adapter.deactivate()
        self.session.clear()
        if not self._torn_down:
            logger.info("🧹 DrawEngine torn down")
        self._torn_down = True

    # ===== Event path =====

    def handle_event(self, event: PointerEvent) -> bool:
        """
        Run one translated host event through the state machine.

        Returns:
            True if the event was consumed by the active mode
        """
        try:
            consumed = self.machine.handle(event)
        except ValidationError as e:
            # The event was meant for drawing even though it was rejected
            self._report_validation_error(e)
            return True

        if consumed:
            self._sync()
        return consumed

    def _sync(self) -> None:
        if self.session.is_idle and self.adapter.active_mode is not None:
            self.adapter.deactivate()
        self._notify_preview()

    def _notify_preview(self) -> None:
        if self.on_preview_changed is not None:
            self.on_preview_changed(self.get_preview_geometry())

    def _report_validation_error(self, error: ValidationError) -> None:
        if self.on_validation_error is not None:
            self.on_validation_error(error)

    # ===== Render layer / application =====

    def get_preview_geometry(self) -> Dict[str, Any]:
        return self.projector.project(self.session)

    def get_committed_geometry(self, kind: Optional[ShapeKind] = None) -> Dict[str, Any]:
        return self.collection.to_feature_collection(kind)

    def remove(self, ids: Iterable[int]) -> List[int]:
        """Host-invoked removal (e.g. trash button)."""
        return self.collection.remove(ids)

    def replace(self, shape_id: int, shape: Shape) -> None:
        """Host-invoked replacement of a committed shape."""
        self.collection.replace(shape_id, shape)
