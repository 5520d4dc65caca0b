"""
Geodesy Module
==============

Pure geometry math on WGS84 longitude/latitude - NO state, NO side effects.

Design:
- Immutable Coordinate (frozen dataclass pattern)
- Haversine for great-circle distance
- Local equirectangular projection for circle tessellation
- Thread-safe by design (pure functions)

Known limitations:
- circle_to_ring is a flat-earth approximation around the center. Good at
  city/neighborhood zoom levels, visibly off for very large radii or near
  the poles.
- rectangle_to_ring is axis aligned in raw lng/lat space, not geodesically
  corrected. At high latitudes it is not a rectangle on a conformal map.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np


EARTH_RADIUS_M = 6_371_000.0

# Meters per degree used by the local equirectangular approximation
METERS_PER_DEGREE_LNG = 111_320.0
METERS_PER_DEGREE_LAT = 110_540.0

DEFAULT_CIRCLE_STEPS = 64


@dataclass(frozen=True)
class Coordinate:
    """
    Immutable longitude/latitude pair in degrees.

    No range validation: the host map is expected to clamp already, so
    out-of-range values are carried as-is.

    Attributes:
        longitude: Degrees east
        latitude: Degrees north
    """

    longitude: float
    latitude: float

    def to_list(self) -> List[float]:
        """GeoJSON position [lng, lat]."""
        return [self.longitude, self.latitude]

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Coordinate":
        """Build from a [lng, lat] pair."""
        if len(values) != 2:
            raise ValueError(f"Coordinate needs exactly 2 values, got {len(values)}")
        return cls(longitude=float(values[0]), latitude=float(values[1]))


def haversine_distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance between two coordinates.

    Args:
        a: First coordinate
        b: Second coordinate

    Returns:
        Distance in meters (symmetric, 0 for identical points, never negative)
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlng = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


def circle_to_ring(
    center: Coordinate,
    radius_meters: float,
    steps: int = DEFAULT_CIRCLE_STEPS
) -> List[Coordinate]:
    """
    Tessellate a circle into a closed ring.

    Walks `steps` equal angular increments over [0, 2*pi] and projects each
    offset with a local equirectangular approximation:

        dlng = r * cos(theta) / (111320 * cos(center_lat_rad))
        dlat = r * sin(theta) / 110540

    Args:
        center: Circle center
        radius_meters: Radius in meters
        steps: Number of segments (ring has steps + 1 points)

    Returns:
        steps + 1 coordinates, last equal to first

    Raises:
        ValueError: If steps < 3
    """
    if steps < 3:
        raise ValueError(f"steps must be >= 3, got {steps}")

    thetas = np.linspace(0.0, 2 * np.pi, steps + 1)
    lat_rad = math.radians(center.latitude)

    dlng = radius_meters * np.cos(thetas) / (METERS_PER_DEGREE_LNG * math.cos(lat_rad))
    dlat = radius_meters * np.sin(thetas) / METERS_PER_DEGREE_LAT

    ring = [
        Coordinate(longitude=float(center.longitude + x), latitude=float(center.latitude + y))
        for x, y in zip(dlng, dlat)
    ]
    # cos/sin(2*pi) are not exactly cos/sin(0); make closure exact
    ring[-1] = ring[0]
    return ring


def rectangle_to_ring(corner1: Coordinate, corner2: Coordinate) -> List[Coordinate]:
    """
    Axis-aligned rectangle (in lng/lat space) as a closed 5-point ring.

    Returns:
        [c1, (c2.lng, c1.lat), c2, (c1.lng, c2.lat), c1]
    """
    return [
        corner1,
        Coordinate(longitude=corner2.longitude, latitude=corner1.latitude),
        corner2,
        Coordinate(longitude=corner1.longitude, latitude=corner2.latitude),
        corner1,
    ]


def ring_to_array(ring: Sequence[Coordinate]) -> np.ndarray:
    """Nx2 float64 array of (lng, lat)."""
    if not ring:
        return np.empty((0, 2), dtype=np.float64)
    return np.array([[c.longitude, c.latitude] for c in ring], dtype=np.float64)

