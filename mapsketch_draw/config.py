"""
Configuration schema for the drawing engine.

Defines the tunable constants of the draw modes (circle radius defaults and
wheel step, polygon minimum vertex count, tessellation resolution, cursor
style) and loads them from YAML.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from mapsketch_draw.geometry.shapes import MIN_CIRCLE_RADIUS_M


@dataclass(frozen=True)
class DrawConfig:
    """
    Drawing engine configuration.

    Immutable after construction (frozen dataclass). Defaults reproduce the
    standard interaction: circles start at 100 m, each wheel notch moves the
    radius by 20 m, radius never drops below 20 m, polygons need 3 vertices.
    """

    default_radius_m: float = 100.0
    radius_step_m: float = 20.0
    min_radius_m: float = MIN_CIRCLE_RADIUS_M
    circle_steps: int = 64
    min_polygon_vertices: int = 3
    cursor_style: str = "crosshair"

    def __post_init__(self):
        """Validate drawing configuration."""
        if self.min_radius_m < MIN_CIRCLE_RADIUS_M:
            raise ValueError(
                f"min_radius_m must be >= {MIN_CIRCLE_RADIUS_M}, got {self.min_radius_m}"
            )

        if self.default_radius_m < self.min_radius_m:
            raise ValueError(
                f"default_radius_m ({self.default_radius_m}) must be >= "
                f"min_radius_m ({self.min_radius_m})"
            )

        if self.radius_step_m <= 0:
            raise ValueError(
                f"radius_step_m must be > 0, got {self.radius_step_m}"
            )

        if self.circle_steps < 3:
            raise ValueError(
                f"circle_steps must be >= 3, got {self.circle_steps}"
            )

        if self.min_polygon_vertices < 3:
            raise ValueError(
                f"min_polygon_vertices must be >= 3, got {self.min_polygon_vertices}"
            )

        if not self.cursor_style:
            raise ValueError("cursor_style cannot be empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DrawConfig":
        """
        Build from a plain dict, rejecting unknown keys.

        Raises:
            ValueError: If a key is unknown or a value is invalid
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(
                f"Unknown draw config keys: {sorted(unknown)}. "
                f"Valid keys: {sorted(known)}"
            )
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "DrawConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            draw:
              default_radius_m: 100
              radius_step_m: 20
              min_radius_m: 20
              circle_steps: 64
              min_polygon_vertices: 3
              cursor_style: "crosshair"

        The top-level `draw:` key is optional.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If YAML is invalid or values fail validation
        """
        path = Path(yaml_path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping in {yaml_path}")

        section = data.get("draw", data)
        if section is None:
            # "draw:" with nothing under it
            section = {}
        if not isinstance(section, dict):
            raise ValueError(f"'draw' section must be a mapping in {yaml_path}")

        return cls.from_dict(section)
