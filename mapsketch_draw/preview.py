"""
Preview Projector
=================

Transient (uncommitted) geometry shown while drawing.

Design:
- Pure function of session state: same session -> same preview
- Recomputed from scratch on every call, never diffed
- Each feature is tagged with properties.role so the render layer can
  style vertices, paths, outlines and labels differently
"""

from typing import Any, Dict, List, Optional

from mapsketch_draw.collection import feature_collection
from mapsketch_draw.config import DrawConfig
from mapsketch_draw.geometry.geodesy import (
    Coordinate,
    circle_to_ring,
    rectangle_to_ring,
)
from mapsketch_draw.session import (
    CircleBuffer,
    DrawSession,
    PolygonBuffer,
    RectangleBuffer,
)


def format_radius(radius_m: float) -> str:
    """Radius label shown at the circle center."""
    return f"{radius_m:.0f} m"


def _feature(role: str, geometry: Dict[str, Any], **properties) -> Dict[str, Any]:
    return {
        "type": "Feature",
        "properties": {"role": role, **properties},
        "geometry": geometry,
    }


def _line(coords: List[Coordinate]) -> Dict[str, Any]:
    return {"type": "LineString", "coordinates": [c.to_list() for c in coords]}


def _polygon(ring: List[Coordinate]) -> Dict[str, Any]:
    return {"type": "Polygon", "coordinates": [[c.to_list() for c in ring]]}


def _point(coord: Coordinate) -> Dict[str, Any]:
    return {"type": "Point", "coordinates": coord.to_list()}


class PreviewProjector:
    """
    Stateless projector from DrawSession to a preview FeatureCollection.

    Usage:
        projector = PreviewProjector(config)
        preview = projector.project(session)
    """

    def __init__(self, config: Optional[DrawConfig] = None):
        self.config = config or DrawConfig()

    def project(self, session: DrawSession) -> Dict[str, Any]:
        buffer = session.buffer
        if isinstance(buffer, PolygonBuffer):
            features = self._polygon(buffer, session.cursor_hint)
        elif isinstance(buffer, CircleBuffer):
            features = self._circle(buffer)
        elif isinstance(buffer, RectangleBuffer):
            features = self._rectangle(buffer)
        else:
            features = []
        return feature_collection(features)

    def _polygon(
        self,
        buffer: PolygonBuffer,
        cursor_hint: Optional[Coordinate],
    ) -> List[Dict[str, Any]]:
        vertices = buffer.vertices
        features = [
            _feature("vertex", _point(vertex), index=index)
            for index, vertex in enumerate(vertices)
        ]

        # No path for a single vertex (would be a degenerate 1-point line)
        if len(vertices) >= 2:
            features.append(_feature("path", _line(vertices)))
            if cursor_hint is not None:
                closing = list(vertices) + [cursor_hint, vertices[0]]
                features.append(_feature("closing", _line(closing)))

        return features

    def _circle(self, buffer: CircleBuffer) -> List[Dict[str, Any]]:
        if buffer.center is None:
            return []
        ring = circle_to_ring(buffer.center, buffer.radius_m, self.config.circle_steps)
        return [
            _feature("outline", _polygon(ring), radius_m=buffer.radius_m),
            _feature("label", _point(buffer.center), label=format_radius(buffer.radius_m)),
        ]

    def _rectangle(self, buffer: RectangleBuffer) -> List[Dict[str, Any]]:
        if buffer.anchor is None or buffer.opposite is None:
            return []
        ring = rectangle_to_ring(buffer.anchor, buffer.opposite)
        return [_feature("outline", _polygon(ring))]
