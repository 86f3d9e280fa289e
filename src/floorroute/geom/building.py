"""Building geometry model.

This module aggregates classified primitives into a building envelope, a
cleaned wall set and per-room boxes inferred by ray casting.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.config import DEFAULT_GEOMETRY_CONFIG, GeometryConfig
from ..core.model import (
    Bounds,
    DetectionResult,
    FloorPatch,
    GeometryResult,
    RoomBox,
    RoomLabel,
    WallSegment,
)
from .segments import cast_box

LOGGER = logging.getLogger(__name__)


def _floor_bounds(floors: Sequence[FloorPatch]) -> Optional[Bounds]:
    boxes = [Bounds(f.min_x, f.min_y, f.max_x, f.max_y) for f in floors]
    if not boxes:
        return None
    return boxes[0].union(*boxes[1:])


def _label_bounds(labels: Sequence[RoomLabel], padding: float) -> Optional[Bounds]:
    box = Bounds.around(label.point for label in labels)
    if box is None:
        return None
    pad_x = box.width * padding
    pad_y = box.height * padding
    return Bounds(box.min_x - pad_x, box.min_y - pad_y, box.max_x + pad_x, box.max_y + pad_y)


def _wall_bounds(walls: Sequence[WallSegment]) -> Optional[Bounds]:
    return Bounds.around(p for wall in walls for p in (wall.p1, wall.p2))


def compute_bounds(
    floors: Sequence[FloorPatch],
    room_labels: Sequence[RoomLabel],
    walls: Sequence[WallSegment],
    config: GeometryConfig = DEFAULT_GEOMETRY_CONFIG,
) -> Optional[Bounds]:
    """Building envelope with a priority fallback.

    Floor patches are the most reliable source, then the padded room label
    cluster, then the raw wall extent. A candidate that contains no wall
    endpoint is skipped, so the envelope always holds at least one wall.

    Returns:
        The envelope, or ``None`` when there are no walls.
    """
    endpoints = [p for wall in walls for p in (wall.p1, wall.p2)]
    candidates = (
        ("floors", _floor_bounds(floors)),
        ("labels", _label_bounds(room_labels, config.label_padding)),
    )
    for source, bounds in candidates:
        if bounds is None:
            continue
        if any(bounds.contains(p) for p in endpoints):
            return bounds
        LOGGER.debug("Skipping %s bounds %s: no wall endpoint inside", source, bounds)
    return _wall_bounds(walls)


def filter_walls(
    walls: Iterable[WallSegment],
    bounds: Optional[Bounds],
    margin: float = DEFAULT_GEOMETRY_CONFIG.wall_margin,
) -> List[WallSegment]:
    """Keep walls with at least one endpoint inside ``bounds`` plus ``margin``."""
    walls = list(walls)
    if bounds is None:
        return walls
    return [w for w in walls if bounds.contains(w.p1, margin) or bounds.contains(w.p2, margin)]


def dedupe_walls(
    walls: Iterable[WallSegment],
    min_length: float = DEFAULT_GEOMETRY_CONFIG.min_wall_length,
    scale: float = DEFAULT_GEOMETRY_CONFIG.dedupe_scale,
) -> List[WallSegment]:
    """Drop tiny walls and collapse near-duplicates, first occurrence wins."""
    unique: Dict[tuple, WallSegment] = {}
    for wall in walls:
        if wall.length < min_length:
            continue
        unique.setdefault(wall.key(scale), wall)
    return list(unique.values())


def compute_room_boxes(
    room_labels: Iterable[RoomLabel],
    walls: Iterable[WallSegment],
    epsilon: float = DEFAULT_GEOMETRY_CONFIG.ray_epsilon,
) -> List[RoomBox]:
    """Infer a box per label from the nearest wall in each cardinal direction.

    Labels whose rays do not all hit a wall produce no box.
    """
    walls = list(walls)
    boxes = []
    for label in room_labels:
        hit = cast_box(label.point, walls, epsilon)
        if hit is None:
            continue
        left, right, top, bottom = hit
        boxes.append(
            RoomBox(
                label.id,
                min(left, right),
                max(left, right),
                min(top, bottom),
                max(top, bottom),
            )
        )
    return boxes


def build_geometry(
    detection: DetectionResult, config: GeometryConfig = DEFAULT_GEOMETRY_CONFIG
) -> GeometryResult:
    """Derive bounds, cleaned walls and room boxes from a detection result."""
    if not detection.walls:
        return GeometryResult()

    bounds = compute_bounds(detection.floors, detection.room_labels, detection.walls, config)
    walls = filter_walls(detection.walls, bounds, config.wall_margin)
    walls = dedupe_walls(walls, config.min_wall_length, config.dedupe_scale)
    # Rays are cast against every detected wall, not only the cleaned set
    boxes = compute_room_boxes(detection.room_labels, detection.walls, config.ray_epsilon)

    LOGGER.debug(
        "Geometry: bounds=%s walls=%d/%d room_boxes=%d",
        bounds,
        len(walls),
        len(detection.walls),
        len(boxes),
    )
    return GeometryResult(
        building_bounds=bounds,
        room_boxes=tuple(boxes),
        filtered_walls=tuple(walls),
    )
