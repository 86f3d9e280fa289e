"""Segment and ray primitives shared by the geometry and routing modules."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

from ..core.model import Point, WallSegment

# Global parameters for algorithm sensitivity
RAY_EPSILON = 1e-6  # Rays nearly parallel to a segment are ignored
CROSS_EPSILON = 1e-9  # Parallel / collinear test for segment crossing

UP = Point(0.0, -1.0)
DOWN = Point(0.0, 1.0)
LEFT = Point(-1.0, 0.0)
RIGHT = Point(1.0, 0.0)


def cross(u: Point, v: Point) -> float:
    """Z component of the 2D cross product."""
    return u.x * v.y - u.y * v.x


def _sub(p: Point, q: Point) -> Point:
    return Point(p.x - q.x, p.y - q.y)


def bbox_overlap(
    a: Tuple[float, float, float, float], b: Tuple[float, float, float, float]
) -> bool:
    """Overlap test of two ``(min_x, min_y, max_x, max_y)`` boxes, touching included."""
    return not (a[2] < b[0] or b[2] < a[0] or a[3] < b[1] or b[3] < a[1])


def segment_bbox(p: Point, q: Point, pad: float = 0.0) -> Tuple[float, float, float, float]:
    return (
        min(p.x, q.x) - pad,
        min(p.y, q.y) - pad,
        max(p.x, q.x) + pad,
        max(p.y, q.y) + pad,
    )


def point_segment_distance(point: Point, a: Point, b: Point) -> float:
    """Distance from ``point`` to the closed segment ``ab``."""
    abx, aby = b.x - a.x, b.y - a.y
    length_sq = abx * abx + aby * aby or 1e-6
    t = ((point.x - a.x) * abx + (point.y - a.y) * aby) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(a.x + t * abx - point.x, a.y + t * aby - point.y)


def segments_cross(a1: Point, a2: Point, b1: Point, b2: Point) -> bool:
    """Proper crossing of segments ``a1a2`` and ``b1b2``.

    Only interior crossings count: touching at an endpoint, parallel and
    collinear overlaps are all treated as passable.
    """
    if not bbox_overlap(segment_bbox(a1, a2), segment_bbox(b1, b2)):
        return False
    r = _sub(a2, a1)
    s = _sub(b2, b1)
    rxs = cross(r, s)
    if abs(rxs) < CROSS_EPSILON:
        return False
    qp = _sub(b1, a1)
    t = cross(qp, s) / rxs
    u = cross(qp, r) / rxs
    return 0.0 < t < 1.0 and 0.0 < u < 1.0


def ray_hit(origin: Point, direction: Point, wall: WallSegment, epsilon: float = RAY_EPSILON) -> Optional[float]:
    """Ray parameter of the hit on ``wall``, or ``None``.

    Hits require ``t > 0`` along the ray and ``0 <= u <= 1`` along the wall.
    """
    a, b = wall.p1, wall.p2
    v1 = _sub(origin, a)
    v2 = _sub(b, a)
    denom = cross(direction, v2)
    if abs(denom) < epsilon:
        return None
    t = cross(v2, v1) / denom
    u = cross(direction, v1) / denom
    if t > 0 and 0.0 <= u <= 1.0:
        return t
    return None


def cast_ray(
    origin: Point, direction: Point, walls: Iterable[WallSegment], epsilon: float = RAY_EPSILON
) -> Optional[Point]:
    """Nearest wall crossing along a ray, or ``None`` if nothing is hit."""
    best_t = math.inf
    for wall in walls:
        t = ray_hit(origin, direction, wall, epsilon)
        if t is not None and t < best_t:
            best_t = t
    if math.isinf(best_t):
        return None
    return Point(origin.x + best_t * direction.x, origin.y + best_t * direction.y)


def cast_box(
    origin: Point, walls, epsilon: float = RAY_EPSILON
) -> Optional[Tuple[float, float, float, float]]:
    """Rectangle ``(left, right, top, bottom)`` from four axis-aligned rays.

    Returns ``None`` unless all four rays hit a wall.
    """
    walls = list(walls)
    up = cast_ray(origin, UP, walls, epsilon)
    down = cast_ray(origin, DOWN, walls, epsilon)
    left = cast_ray(origin, LEFT, walls, epsilon)
    right = cast_ray(origin, RIGHT, walls, epsilon)
    if up is None or down is None or left is None or right is None:
        return None
    return left.x, right.x, up.y, down.y
