"""
Neutral input events consumed by the state machine.

Host-specific event objects are translated into PointerEvent by the
InputEventAdapter; nothing downstream sees host objects except through
`raw_event`, which is passed along untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mapsketch_draw.geometry.geodesy import Coordinate


class EventType(str, Enum):
    """Host event names (the values are the names passed to host.on/off)."""
    PRIMARY_CLICK = "primaryClick"
    DOUBLE_CLICK = "doubleClick"
    POINTER_MOVE = "pointerMove"
    WHEEL = "wheel"


@dataclass(frozen=True)
class PointerEvent:
    """
    Single pointer event.

    Attributes:
        event_type: Which kind of input
        coordinate: Pointer position on the map
        delta: Wheel delta (0.0 for other events)
        raw_event: Original host event, untouched
    """

    event_type: EventType
    coordinate: Coordinate
    delta: float = 0.0
    raw_event: Any = None
