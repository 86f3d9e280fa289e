"""Door locator.

Finds the most likely doorway on the boundary of the room around an anchor
point by sampling each edge of the ray-cast rectangle for gaps in the walls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..core.config import DEFAULT_DOOR_CONFIG, DoorConfig
from ..core.model import Point, WallSegment
from .segments import cast_box, point_segment_distance


@dataclass(frozen=True)
class EdgeGap:
    """Longest wall-free run found on one edge.

    Attributes:
        edge: ``top``, ``bottom``, ``left`` or ``right``.
        t0: Run start along the edge, in ``[0, 1]``.
        t1: Run end along the edge, in ``[0, 1]``.
        midpoint: Point halfway along the run.
    """

    edge: str
    t0: float
    t1: float
    midpoint: Point

    @property
    def length(self) -> float:
        return self.t1 - self.t0


def _lerp(a: Point, b: Point, t: float) -> Point:
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def _has_wall_near(point: Point, walls: Sequence[WallSegment], threshold: float) -> bool:
    return any(point_segment_distance(point, w.p1, w.p2) <= threshold for w in walls)


def longest_gap(
    edge: str,
    a: Point,
    b: Point,
    inward: Point,
    walls: Sequence[WallSegment],
    config: DoorConfig = DEFAULT_DOOR_CONFIG,
) -> Optional[EdgeGap]:
    """Longest contiguous no-wall run on edge ``ab``.

    Each sample is tested on the edge and shifted along ``inward`` so walls
    drawn on their centre line are still found.
    """
    samples = max(1, config.samples)
    flags = []
    for i in range(samples + 1):
        t = i / samples
        p = _lerp(a, b, t)
        q = Point(p.x + inward.x * config.inward_offset, p.y + inward.y * config.inward_offset)
        wall = _has_wall_near(p, walls, config.wall_threshold) or _has_wall_near(
            q, walls, config.wall_threshold
        )
        flags.append((t, wall))

    best = (0.0, 0.0, 0.0)
    run_start = None
    for t, wall in flags:
        if not wall:
            if run_start is None:
                run_start = t
        elif run_start is not None:
            if t - run_start > best[0]:
                best = (t - run_start, run_start, t)
            run_start = None
    if run_start is not None and 1.0 - run_start > best[0]:
        best = (1.0 - run_start, run_start, 1.0)

    length, t0, t1 = best
    if length <= 0:
        return None
    return EdgeGap(edge, t0, t1, _lerp(a, b, (t0 + t1) / 2))


def find_edge_gaps(
    anchor: Point, walls: Sequence[WallSegment], config: DoorConfig = DEFAULT_DOOR_CONFIG
) -> List[EdgeGap]:
    """Qualifying gaps of the room rectangle around ``anchor``, in edge order."""
    walls = list(walls)
    box = cast_box(anchor, walls)
    if box is None:
        return []
    left, right, top, bottom = box
    edges = [
        ("top", Point(left, top), Point(right, top), Point(0.0, 1.0)),
        ("bottom", Point(left, bottom), Point(right, bottom), Point(0.0, -1.0)),
        ("left", Point(left, top), Point(left, bottom), Point(1.0, 0.0)),
        ("right", Point(right, top), Point(right, bottom), Point(-1.0, 0.0)),
    ]
    gaps = []
    for name, a, b, inward in edges:
        gap = longest_gap(name, a, b, inward, walls, config)
        if gap is not None and gap.length > config.min_gap_fraction:
            gaps.append(gap)
    return gaps


def locate_door(
    anchor: Point, walls: Sequence[WallSegment], config: DoorConfig = DEFAULT_DOOR_CONFIG
) -> Optional[Point]:
    """Most likely doorway of the room around ``anchor``.

    Args:
        anchor: A point inside the room, usually its label anchor.
        walls: Wall segments to probe.
        config: Sampling parameters.

    Returns:
        Midpoint of the qualifying gap closest to the anchor (ties resolved
        in top, bottom, left, right order), or ``None`` when the room box
        cannot be built or no edge has a large enough gap.
    """
    if not anchor.is_finite():
        return None
    best = None
    best_distance = float("inf")
    for gap in find_edge_gaps(anchor, walls, config):
        distance = gap.midpoint.distance_to(anchor)
        if distance < best_distance:
            best = gap.midpoint
            best_distance = distance
    return best
