"""
Shape Collection Module
=======================

Append-only store of committed shapes.

Design:
- Mutable ordered store (private), GeoJSON snapshots on demand
- Ids are sequential integers, never reused
- Full recomputation on every projection (no incremental cache)
- Removal/replacement are host-invoked (e.g. a trash button);
  the drawing core itself only ever appends
"""

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from mapsketch_draw.geometry.geodesy import DEFAULT_CIRCLE_STEPS
from mapsketch_draw.geometry.shapes import Shape, ShapeKind

logger = logging.getLogger(__name__)

ShapeCallback = Callable[[Shape, int], None]
DeleteCallback = Callable[[List[int]], None]


def feature_collection(features: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Wrap features into a GeoJSON FeatureCollection dict."""
    return {"type": "FeatureCollection", "features": features}


class ShapeCollection:
    """
    Ordered store of committed shapes with change notifications.

    Usage:
        collection = ShapeCollection(on_shape_created=print)
        shape_id = collection.commit(shape)
        fc = collection.to_feature_collection(ShapeKind.CIRCLE)
        collection.remove([shape_id])
    """

    def __init__(
        self,
        circle_steps: int = DEFAULT_CIRCLE_STEPS,
        on_shape_created: Optional[ShapeCallback] = None,
        on_shape_updated: Optional[ShapeCallback] = None,
        on_shape_deleted: Optional[DeleteCallback] = None,
    ):
        """
        Args:
            circle_steps: Tessellation resolution used when exporting circles
            on_shape_created: Called with (shape, id) after each commit
            on_shape_updated: Called with (shape, id) after each replace
            on_shape_deleted: Called with the list of removed ids
        """
        self.circle_steps = circle_steps
        self.on_shape_created = on_shape_created
        self.on_shape_updated = on_shape_updated
        self.on_shape_deleted = on_shape_deleted

        self._entries: List[Tuple[int, Shape]] = []
        self._next_id = 1

    def commit(self, shape: Shape) -> int:
        """Append a shape and return its new id. Never fails."""
        shape_id = self._next_id
        self._next_id += 1
        self._entries.append((shape_id, shape))

        logger.info(f"✅ Committed {shape.kind.value} #{shape_id}")
        if self.on_shape_created is not None:
            self.on_shape_created(shape, shape_id)
        return shape_id

    def remove(self, ids: Iterable[int]) -> List[int]:
        """
        Remove entries whose id is in `ids`.

        Returns:
            Ids actually removed, in store order (unknown ids are ignored)
        """
        wanted = set(ids)
        removed = [shape_id for shape_id, _ in self._entries if shape_id in wanted]
        if not removed:
            return []

        self._entries = [entry for entry in self._entries if entry[0] not in wanted]
        logger.info(f"🗑️ Removed shapes {removed}")
        if self.on_shape_deleted is not None:
            self.on_shape_deleted(removed)
        return removed

    def replace(self, shape_id: int, shape: Shape) -> None:
        """
        Replace the shape stored under `shape_id`, keeping id and position.

        Raises:
            KeyError: If no entry has that id
        """
        for index, (existing_id, _) in enumerate(self._entries):
            if existing_id == shape_id:
                self._entries[index] = (shape_id, shape)
                break
        else:
            raise KeyError(f"No shape with id {shape_id}")

        logger.info(f"✏️ Replaced shape #{shape_id}")
        if self.on_shape_updated is not None:
            self.on_shape_updated(shape, shape_id)

    def get(self, shape_id: int) -> Optional[Shape]:
        for existing_id, shape in self._entries:
            if existing_id == shape_id:
                return shape
        return None

    def ids(self, kind: Optional[ShapeKind] = None) -> List[int]:
        return [shape_id for shape_id, shape in self._filtered(kind)]

    def to_feature(self, shape_id: int, shape: Shape) -> Dict[str, Any]:
        """Single GeoJSON Feature for a stored shape."""
        properties = {"id": shape_id, "kind": shape.kind.value}
        properties.update(shape.properties())
        return {
            "type": "Feature",
            "properties": properties,
            "geometry": shape.to_geometry(self.circle_steps),
        }

    def to_feature_collection(self, kind: Optional[ShapeKind] = None) -> Dict[str, Any]:
        """
        Project the store into a GeoJSON FeatureCollection.

        Args:
            kind: Only include shapes of this kind (None = all)

        Returns:
            Fresh dict, deterministic for the same store contents
        """
        return feature_collection([
            self.to_feature(shape_id, shape)
            for shape_id, shape in self._filtered(kind)
        ])

    def _filtered(self, kind: Optional[ShapeKind]) -> List[Tuple[int, Shape]]:
        if kind is None:
            return list(self._entries)
        kind = ShapeKind(kind)
        return [entry for entry in self._entries if entry[1].kind is kind]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[int, Shape]]:
        return iter(list(self._entries))
