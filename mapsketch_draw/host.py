"""
Host Map Interface
==================

What the drawing core needs from a map component: subscribe/unsubscribe
to named pointer events, and optionally get/set the cursor style.

Event payloads delivered to handlers look like:

    {
        "coordinate": {"longitude": 127.0, "latitude": 37.5},
        "rawEvent": <host event object>,
        "delta": 1.0,            # wheel events only
    }

ScriptedHostMap is an in-memory implementation used for replaying
scripted sessions (CLI) and in tests.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Protocol

HostHandler = Callable[[Any], None]


class HostMap(Protocol):
    """Protocol for host map components (interface)."""

    def on(self, event_type: str, handler: HostHandler) -> None:
        """Register handler for event_type."""
        ...

    def off(self, event_type: str, handler: HostHandler) -> None:
        """Unregister a handler previously passed to on()."""
        ...


class RawEvent:
    """Minimal host event with a preventable default action."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        self.default_prevented = False

    def prevent_default(self) -> None:
        self.default_prevented = True


class ScriptedHostMap:
    """
    In-memory host map.

    Keeps handler lists per event type and delivers synthetic payloads,
    one event at a time, to a snapshot of the registered handlers.

    Usage:
        host = ScriptedHostMap()
        engine = DrawEngine(host)
        engine.select_mode(ShapeKind.POLYGON)
        host.click(127.0, 37.5)
        raw = host.double_click(127.0, 37.5)
        assert raw.default_prevented
    """

    def __init__(self, cursor_style: str = "default"):
        self._handlers: Dict[str, List[HostHandler]] = defaultdict(list)
        self._cursor_style = cursor_style
        self.last_coordinate = (0.0, 0.0)

    def on(self, event_type: str, handler: HostHandler) -> None:
        self._handlers[event_type].append(handler)

    def off(self, event_type: str, handler: HostHandler) -> None:
        """Raises ValueError if the handler was not registered."""
        self._handlers[event_type].remove(handler)

    def handler_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())

    def get_cursor_style(self) -> str:
        return self._cursor_style

    def set_cursor_style(self, style: str) -> None:
        self._cursor_style = style

    def emit(self, event_type: str, payload: Any) -> None:
        """Deliver a raw payload to every handler registered right now."""
        for handler in list(self._handlers.get(event_type, [])):
            handler(payload)

    def emit_pointer(
        self,
        event_type: str,
        longitude: float,
        latitude: float,
        delta: Optional[float] = None,
    ) -> RawEvent:
        """Build a standard payload at (longitude, latitude) and emit it."""
        raw = RawEvent(event_type)
        payload = {
            "coordinate": {"longitude": longitude, "latitude": latitude},
            "rawEvent": raw,
        }
        if delta is not None:
            payload["delta"] = delta
        self.last_coordinate = (longitude, latitude)
        self.emit(event_type, payload)
        return raw

    def click(self, longitude: float, latitude: float) -> RawEvent:
        return self.emit_pointer("primaryClick", longitude, latitude)

    def double_click(self, longitude: float, latitude: float) -> RawEvent:
        return self.emit_pointer("doubleClick", longitude, latitude)

    def move(self, longitude: float, latitude: float) -> RawEvent:
        return self.emit_pointer("pointerMove", longitude, latitude)

    def wheel(self, delta: float) -> RawEvent:
        """Wheel at the last pointer position."""
        longitude, latitude = self.last_coordinate
        return self.emit_pointer("wheel", longitude, latitude, delta=delta)
