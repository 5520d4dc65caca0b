"""
Input Event Adapter
===================

Bridges host map events to the drawing core.

Responsibilities:
- Subscribe to exactly the event kinds the active mode needs
- Tear every subscription down synchronously on mode exit
- Translate host payloads into PointerEvent (drop malformed ones)
- Suppress the host's zoom-on-double-click when drawing consumes it
- Switch the host cursor while a mode is active

Subscriptions per mode:
    COLLECTING_POLYGON   primaryClick, doubleClick, pointerMove
    PLACING_CIRCLE       primaryClick, wheel
    DRAGGING_RECTANGLE   primaryClick, doubleClick, pointerMove

Stale handlers: each activate() bumps a generation counter and every
handler checks it, so a handler that the host still delivers after
teardown never reaches the engine.
"""

import logging
import math
import numbers
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Tuple

from mapsketch_draw.errors import MalformedInputEvent
from mapsketch_draw.events import EventType, PointerEvent
from mapsketch_draw.geometry.geodesy import Coordinate
from mapsketch_draw.host import HostHandler, HostMap
from mapsketch_draw.session import Mode

logger = logging.getLogger(__name__)

SUBSCRIPTIONS = {
    Mode.COLLECTING_POLYGON: (EventType.PRIMARY_CLICK, EventType.DOUBLE_CLICK, EventType.POINTER_MOVE),
    Mode.PLACING_CIRCLE: (EventType.PRIMARY_CLICK, EventType.WHEEL),
    Mode.DRAGGING_RECTANGLE: (EventType.PRIMARY_CLICK, EventType.DOUBLE_CLICK, EventType.POINTER_MOVE),
}


def _read(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _finite_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise MalformedInputEvent(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise MalformedInputEvent(f"{name} must be finite, got {value!r}")
    return value


def translate_event(event_type: EventType, payload: Any) -> PointerEvent:
    """
    Translate a host payload into a PointerEvent.

    Args:
        event_type: Event kind the payload was delivered for
        payload: Mapping or object with `coordinate`, `rawEvent` and
                 (wheel only) `delta`

    Raises:
        MalformedInputEvent: Missing/invalid coordinate, or wheel without delta
    """
    if payload is None:
        raise MalformedInputEvent("Event payload is empty")

    raw_coordinate = _read(payload, "coordinate")
    if raw_coordinate is None:
        raise MalformedInputEvent("Event has no coordinate")

    coordinate = Coordinate(
        longitude=_finite_number(_read(raw_coordinate, "longitude"), "longitude"),
        latitude=_finite_number(_read(raw_coordinate, "latitude"), "latitude"),
    )

    delta = 0.0
    if event_type is EventType.WHEEL:
        delta = _finite_number(_read(payload, "delta"), "delta")

    return PointerEvent(
        event_type=event_type,
        coordinate=coordinate,
        delta=delta,
        raw_event=_read(payload, "rawEvent"),
    )


class InputEventAdapter:
    """
    Mode-scoped subscription manager for a host map.

    Usage:
        adapter = InputEventAdapter(host, dispatch=engine.handle_event)
        adapter.activate(Mode.PLACING_CIRCLE)   # on(primaryClick), on(wheel)
        adapter.deactivate()                    # off(...) for both, idempotent
    """

    def __init__(
        self,
        host: HostMap,
        dispatch: Callable[[PointerEvent], bool],
        cursor_style: str = "crosshair",
    ):
        """
        Args:
            host: Host map exposing on/off (and optionally cursor style)
            dispatch: Receives each translated event, returns True if consumed
            cursor_style: Cursor shown while a mode is active
        """
        self.host = host
        self.dispatch = dispatch
        self.cursor_style = cursor_style

        self._subscriptions: List[Tuple[str, HostHandler]] = []
        self._generation = 0
        self._active_mode: Optional[Mode] = None
        self._saved_cursor: Optional[str] = None

    @property
    def active_mode(self) -> Optional[Mode]:
        return self._active_mode

    @property
    def subscribed_event_types(self) -> List[str]:
        return [event_name for event_name, _ in self._subscriptions]

    def activate(self, mode: Mode) -> None:
        """Replace current subscriptions with those of `mode`."""
        self.deactivate()
        if mode is Mode.IDLE:
            return

        self._generation += 1
        for event_type in SUBSCRIPTIONS[mode]:
            handler = self._make_handler(event_type, self._generation)
            self.host.on(event_type.value, handler)
            self._subscriptions.append((event_type.value, handler))

        self._active_mode = mode
        self._set_cursor()
        logger.debug(f"Subscribed to {self.subscribed_event_types} for {mode.value}")

    def deactivate(self) -> None:
        """Remove exactly the handlers added by activate(). Safe to repeat."""
        # Invalidate before removing so nothing in flight can slip through
        self._generation += 1
        subscriptions, self._subscriptions = self._subscriptions, []
        for event_name, handler in subscriptions:
            self.host.off(event_name, handler)

        if self._active_mode is not None:
            logger.debug(f"Unsubscribed {len(subscriptions)} handlers ({self._active_mode.value})")
            self._restore_cursor()
        self._active_mode = None

    def _make_handler(self, event_type: EventType, generation: int) -> HostHandler:
        def handler(payload: Any) -> None:
            if generation != self._generation:
                logger.debug(f"Dropping stale {event_type.value} handler call")
                return

            try:
                event = translate_event(event_type, payload)
            except MalformedInputEvent as e:
                logger.debug(f"Dropping malformed {event_type.value} event: {e}")
                return

            consumed = self.dispatch(event)
            if consumed and event_type is EventType.DOUBLE_CLICK:
                self._suppress_default(event.raw_event)

        return handler

    @staticmethod
    def _suppress_default(raw_event: Any) -> None:
        prevent_default = getattr(raw_event, "prevent_default", None)
        if callable(prevent_default):
            prevent_default()

    def _set_cursor(self) -> None:
        set_style = getattr(self.host, "set_cursor_style", None)
        if not callable(set_style):
            return
        get_style = getattr(self.host, "get_cursor_style", None)
        self._saved_cursor = get_style() if callable(get_style) else None
        set_style(self.cursor_style)

    def _restore_cursor(self) -> None:
        set_style = getattr(self.host, "set_cursor_style", None)
        if callable(set_style):
            set_style(self._saved_cursor or "default")
        self._saved_cursor = None
