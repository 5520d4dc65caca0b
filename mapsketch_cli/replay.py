"""
Session Replay
==============

Runs a scripted drawing session against an in-memory host map.

Script format (YAML):

    steps:
      - select: polygon
      - click: [127.000, 37.500]
      - click: [127.010, 37.500]
      - move: [127.010, 37.510]
      - click: [127.010, 37.510]
      - dblclick: [127.010, 37.510]
      - select: circle
      - click: [127.020, 37.520]
      - wheel: 1            # > 0 grows, < 0 shrinks
      - click: [127.020, 37.520]
      - finish
      - remove: [1]

A step is either a bare name or a single-key mapping name -> argument.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import yaml

from mapsketch_draw import DrawConfig, DrawEngine, ScriptedHostMap, ShapeKind, ValidationError

from .registry import StepRegistry

logger = logging.getLogger(__name__)


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load YAML file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If YAML is invalid or its root is not a mapping
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Script file not found: {config_path}")

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}")

    if not isinstance(config, dict):
        raise ValueError(f"{config_path}: expected a mapping at the top level")
    return config


def parse_step(raw_step: Any) -> Tuple[str, Any]:
    """
    Split a script entry into (name, argument).

    Raises:
        ValueError: If the entry is neither a name nor a single-key mapping
    """
    if isinstance(raw_step, str):
        return raw_step, None
    if isinstance(raw_step, dict) and len(raw_step) == 1:
        (name, argument), = raw_step.items()
        return str(name), argument
    raise ValueError(f"Invalid step {raw_step!r}: expected a name or a single-key mapping")


def _position(value: Any) -> Tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"Expected [longitude, latitude], got {value!r}")
    return float(value[0]), float(value[1])


@dataclass
class ReplayResult:
    """Outcome of a replayed script."""
    steps_run: int = 0
    committed_ids: List[int] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)


class SessionReplayer:
    """
    Feeds script steps into a DrawEngine through a ScriptedHostMap.

    Usage:
        replayer = SessionReplayer()
        result = replayer.run(load_yaml_config("session.yaml")["steps"])
        replayer.engine.get_committed_geometry()
    """

    def __init__(self, config: Optional[DrawConfig] = None, host: Optional[ScriptedHostMap] = None):
        self.host = host or ScriptedHostMap()
        self.result = ReplayResult()
        self.engine = DrawEngine(
            self.host,
            config=config,
            on_shape_created=self._on_shape_created,
            on_validation_error=self._on_validation_error,
        )

        self.registry = StepRegistry()
        self.registry.register(
            'select', self._select, "Start drawing a polygon, circle or rectangle", takes_argument=True
        )
        self.registry.register('click', self._click, "Primary click at [lng, lat]", takes_argument=True)
        self.registry.register('dblclick', self._double_click, "Double click at [lng, lat]", takes_argument=True)
        self.registry.register('move', self._move, "Pointer move to [lng, lat]", takes_argument=True)
        self.registry.register(
            'wheel', self._wheel, "Wheel by delta at the last pointer position", takes_argument=True
        )
        self.registry.register('cancel', self.engine.cancel, "Discard the current session")
        self.registry.register('finish', self.engine.finish, "Commit the current session")
        self.registry.register('remove', self._remove, "Remove committed shapes by id", takes_argument=True)

    def run(self, steps: Sequence[Any]) -> ReplayResult:
        """
        Execute every step in order.

        Step names and arity are checked for the whole script before the
        first step runs.

        Raises:
            StepNotAvailableError: Unknown step name
            ValueError: Malformed step, missing or unexpected argument
            InvariantViolation: finish with nothing to commit
        """
        parsed = [parse_step(raw_step) for raw_step in steps]
        for name, argument in parsed:
            self.registry.check(name, argument)

        for index, (name, argument) in enumerate(parsed, start=1):
            logger.debug(f"Step {index}: {name} {argument if argument is not None else ''}")
            self.registry.execute(name, argument)
            self.result.steps_run += 1
        return self.result

    def _on_shape_created(self, shape, shape_id: int) -> None:
        self.result.committed_ids.append(shape_id)

    def _on_validation_error(self, error: ValidationError) -> None:
        self.result.validation_errors.append(str(error))

    def _select(self, kind: str) -> None:
        self.engine.select_mode(ShapeKind(kind))

    def _click(self, position: Any) -> None:
        self.host.click(*_position(position))

    def _double_click(self, position: Any) -> None:
        self.host.double_click(*_position(position))

    def _move(self, position: Any) -> None:
        self.host.move(*_position(position))

    def _wheel(self, delta: Any) -> None:
        self.host.wheel(float(delta))

    def _remove(self, ids: Any) -> None:
        if isinstance(ids, int):
            ids = [ids]
        self.engine.remove(int(shape_id) for shape_id in ids)
