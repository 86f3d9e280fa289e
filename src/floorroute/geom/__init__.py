"""Geometry utilities for floorplans.

This module derives the building envelope, cleaned walls and room boxes
from a detection result, and locates doorways on room boundaries.
"""

from .building import build_geometry, compute_bounds, compute_room_boxes, dedupe_walls, filter_walls
from .doors import locate_door
from .spatial import WallIndex

__all__ = [
    "build_geometry",
    "compute_bounds",
    "filter_walls",
    "dedupe_walls",
    "compute_room_boxes",
    "locate_door",
    "WallIndex",
]
