"""
Shape Visualizer Module
=======================

Snapshot rendering of committed and preview geometry onto a frame.

Design:
- Stateless rendering (pure functions of the FeatureCollections)
- No drawing logic, no session access
- Configurable styles
- Uses supervision drawing utilities

Dependencies:
- supervision (draw utilities, Color, Point)
- numpy (arrays)
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Sequence, Tuple

import numpy as np
import supervision as sv


def iter_positions(geometry: Dict[str, Any]) -> Iterator[Sequence[float]]:
    """Yield every [lng, lat] position of a Point/LineString/Polygon geometry."""
    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates", [])
    if geometry_type == "Point":
        yield coordinates
    elif geometry_type == "LineString":
        yield from coordinates
    elif geometry_type == "Polygon":
        for ring in coordinates:
            yield from ring


@dataclass(frozen=True)
class Viewport:
    """
    Immutable lng/lat bounding box mapped onto a pixel frame.

    Plain equirectangular mapping: longitude scales linearly to x,
    latitude linearly to y (north at the top).

    Attributes:
        west, south, east, north: Bounds in degrees
        width, height: Frame size in pixels
    """

    west: float
    south: float
    east: float
    north: float
    width: int = 800
    height: int = 600

    def __post_init__(self):
        """Validate bounds and size."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport size must be positive, got {self.width}x{self.height}")
        if self.east <= self.west:
            raise ValueError(f"east ({self.east}) must be > west ({self.west})")
        if self.north <= self.south:
            raise ValueError(f"north ({self.north}) must be > south ({self.south})")

    def to_pixels(self, positions: Sequence[Sequence[float]]) -> np.ndarray:
        """
        Map [lng, lat] positions to pixel coordinates.

        Returns:
            Nx2 int32 array of (x, y)
        """
        array = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        x = (array[:, 0] - self.west) / (self.east - self.west) * (self.width - 1)
        y = (self.north - array[:, 1]) / (self.north - self.south) * (self.height - 1)
        return np.round(np.column_stack([x, y])).astype(np.int32)

    @classmethod
    def fit(
        cls,
        collections: Iterable[Dict[str, Any]],
        width: int = 800,
        height: int = 600,
        padding: float = 0.1,
        min_span_deg: float = 0.001,
    ) -> "Viewport":
        """
        Smallest viewport containing every feature, plus padding.

        Args:
            collections: GeoJSON FeatureCollections
            width, height: Frame size in pixels
            padding: Fraction of the span added on each side
            min_span_deg: Span used when all positions coincide

        Raises:
            ValueError: If the collections contain no positions
        """
        positions = [
            position
            for collection in collections
            for feature in collection.get("features", [])
            for position in iter_positions(feature.get("geometry") or {})
        ]
        if not positions:
            raise ValueError("Cannot fit a viewport to empty geometry")

        array = np.asarray(positions, dtype=np.float64)
        west, south = array.min(axis=0)
        east, north = array.max(axis=0)

        lng_span = max(east - west, min_span_deg)
        lat_span = max(north - south, min_span_deg)
        lng_center = (west + east) / 2
        lat_center = (south + north) / 2
        half_lng = lng_span * (0.5 + padding)
        half_lat = lat_span * (0.5 + padding)

        return cls(
            west=float(lng_center - half_lng),
            south=float(lat_center - half_lat),
            east=float(lng_center + half_lng),
            north=float(lat_center + half_lat),
            width=width,
            height=height,
        )


class ShapeVisualizer:
    """
    Stateless visualizer for drawn shapes.

    Usage:
        visualizer = ShapeVisualizer(shape_color=sv.Color.BLUE)
        viewport = Viewport.fit([committed, preview])
        frame = visualizer.render(committed, preview, viewport)
    """

    def __init__(
        self,
        shape_color: sv.Color = sv.Color(r=0, g=0, b=255),
        preview_color: sv.Color = sv.Color(r=255, g=0, b=0),
        text_color: sv.Color = sv.Color(r=255, g=255, b=255),
        text_background_color: sv.Color = sv.Color(r=0, g=0, b=0),
        background_color: Tuple[int, int, int] = (255, 255, 255),
        thickness: int = 2,
        text_scale: float = 0.5,
        text_thickness: int = 1,
        text_padding: int = 6,
        opacity: float = 0.3,
        vertex_radius: int = 5,
        show_ids: bool = True,
    ):
        """
        Initialize visualizer with style configuration.

        Args:
            shape_color: Outline/fill color for committed shapes
            preview_color: Color for in-progress geometry
            text_color: Color for labels
            text_background_color: Background for labels
            background_color: BGR fill for fresh frames
            thickness: Line thickness
            text_scale: Label scale
            text_thickness: Label stroke thickness
            text_padding: Label background padding
            opacity: Polygon fill opacity (0-1)
            vertex_radius: Radius of vertex markers in pixels
            show_ids: Draw "#id" next to committed shapes
        """
        self.shape_color = shape_color
        self.preview_color = preview_color
        self.text_color = text_color
        self.text_background_color = text_background_color
        self.background_color = background_color
        self.thickness = thickness
        self.text_scale = text_scale
        self.text_thickness = text_thickness
        self.text_padding = text_padding
        self.opacity = opacity
        self.vertex_radius = vertex_radius
        self.show_ids = show_ids

    def blank_frame(self, viewport: Viewport) -> np.ndarray:
        frame = np.zeros((viewport.height, viewport.width, 3), dtype=np.uint8)
        frame[:] = self.background_color
        return frame

    def render(
        self,
        committed: Dict[str, Any],
        preview: Dict[str, Any],
        viewport: Viewport,
    ) -> np.ndarray:
        """Fresh frame with committed shapes under the preview."""
        frame = self.blank_frame(viewport)
        frame = self.draw_collection(frame, committed, viewport, self.shape_color)
        frame = self.draw_collection(frame, preview, viewport, self.preview_color)
        return frame

    def draw_collection(
        self,
        frame: np.ndarray,
        collection: Dict[str, Any],
        viewport: Viewport,
        color: sv.Color,
    ) -> np.ndarray:
        for feature in collection.get("features", []):
            frame = self.draw_feature(frame, feature, viewport, color)
        return frame

    def draw_feature(
        self,
        frame: np.ndarray,
        feature: Dict[str, Any],
        viewport: Viewport,
        color: sv.Color,
    ) -> np.ndarray:
        geometry = feature.get("geometry") or {}
        properties = feature.get("properties") or {}
        geometry_type = geometry.get("type")

        if geometry_type == "Polygon":
            frame = self._draw_polygon(frame, geometry["coordinates"], viewport, color)
            if self.show_ids and "id" in properties:
                pixels = viewport.to_pixels(geometry["coordinates"][0])
                frame = self._draw_label(frame, f"#{properties['id']}", pixels)
        elif geometry_type == "LineString":
            frame = self._draw_path(frame, viewport.to_pixels(geometry["coordinates"]), color)
        elif geometry_type == "Point":
            pixels = viewport.to_pixels([geometry["coordinates"]])
            if "label" in properties:
                frame = self._draw_label(frame, str(properties["label"]), pixels)
            else:
                frame = self._draw_vertex(frame, pixels[0], color)
        return frame

    def _draw_polygon(
        self,
        frame: np.ndarray,
        rings: List[Sequence[Sequence[float]]],
        viewport: Viewport,
        color: sv.Color,
    ) -> np.ndarray:
        outer = viewport.to_pixels(rings[0])
        if len(outer) < 3:
            return frame

        # Draw filled polygon (with opacity)
        frame = sv.draw_filled_polygon(
            scene=frame,
            polygon=outer,
            color=color,
            opacity=self.opacity,
        )

        # Draw polygon outline
        frame = sv.draw_polygon(
            scene=frame,
            polygon=outer,
            color=color,
            thickness=self.thickness,
        )
        return frame

    def _draw_path(self, frame: np.ndarray, pixels: np.ndarray, color: sv.Color) -> np.ndarray:
        for (x1, y1), (x2, y2) in zip(pixels[:-1], pixels[1:]):
            frame = sv.draw_line(
                scene=frame,
                start=sv.Point(x=int(x1), y=int(y1)),
                end=sv.Point(x=int(x2), y=int(y2)),
                color=color,
                thickness=self.thickness,
            )
        return frame

    def _draw_vertex(self, frame: np.ndarray, pixel: np.ndarray, color: sv.Color) -> np.ndarray:
        """Draw a filled circle using polygon approximation."""
        angles = np.linspace(0, 2 * np.pi, 16)
        points = np.array([
            [int(pixel[0] + self.vertex_radius * np.cos(a)), int(pixel[1] + self.vertex_radius * np.sin(a))]
            for a in angles
        ], dtype=np.int32)
        return sv.draw_filled_polygon(scene=frame, polygon=points, color=color)

    def _draw_label(self, frame: np.ndarray, text: str, pixels: np.ndarray) -> np.ndarray:
        # Position text at top-left of the bounding box
        min_x = int(np.min(pixels[:, 0]))
        min_y = int(np.min(pixels[:, 1]))
        text_anchor = sv.Point(x=max(min_x, 0), y=max(min_y - 10, 20))

        return sv.draw_text(
            scene=frame,
            text=text,
            text_anchor=text_anchor,
            text_color=self.text_color,
            text_scale=self.text_scale,
            text_thickness=self.text_thickness,
            text_padding=self.text_padding,
            background_color=self.text_background_color,
        )
