"""
Rendering Layer
===============

Bounded Context: Snapshot drawing of sketch geometry.

Responsibilities:
- Map lng/lat positions onto a pixel frame (Viewport)
- Draw committed shapes and live preview (polygons, paths, vertices, labels)
- Pure rendering - no drawing logic, no state

Non-responsibilities:
- Input handling (handled by input_adapter)
- Shape logic (handled by state_machine)
- Live map rendering (the host map does that)
"""

from mapsketch_draw.rendering.visualizer import ShapeVisualizer, Viewport, iter_positions

__all__ = [
    "ShapeVisualizer",
    "Viewport",
    "iter_positions",
]
