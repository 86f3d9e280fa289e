"""Spatial index over wall segments backed by a shapely STRtree."""

from __future__ import annotations

import math
from collections import defaultdict
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from shapely.geometry import LineString, box
from shapely.geometry import Point as ShapelyPoint
from shapely.strtree import STRtree

from ..core.model import Point, WallSegment
from .segments import CROSS_EPSILON, cross, point_segment_distance, segment_bbox, segments_cross

VISIBILITY_PAD = 0.001  # Padding of the query box around a sight line
JUNCTION_EPSILON = 1e-6  # Wall endpoints closer than this are one junction


def _junction_key(point: Point) -> Tuple[int, int]:
    return round(point.x / JUNCTION_EPSILON), round(point.y / JUNCTION_EPSILON)


def _inside_corner(direction: Point, a: Point, b: Point) -> bool:
    """True when ``direction`` points strictly into the convex angle between ``a`` and ``b``."""
    turn = cross(a, b)
    if abs(turn) < CROSS_EPSILON:
        return False
    return cross(a, direction) * turn > 0 and cross(direction, b) * turn > 0


class WallIndex:
    """Answers sight-line and proximity queries against a fixed wall set."""

    def __init__(self, walls: Sequence[WallSegment]):
        self.walls: List[WallSegment] = list(walls)
        self._geoms = [LineString([(w.p1.x, w.p1.y), (w.p2.x, w.p2.y)]) for w in self.walls]
        self._tree = STRtree(self._geoms) if self._geoms else None
        # Junction vertex -> directions of the walls leaving it
        arms: Dict[Tuple[int, int], List[Point]] = defaultdict(list)
        for w in self.walls:
            arms[_junction_key(w.p1)].append(Point(w.p2.x - w.p1.x, w.p2.y - w.p1.y))
            arms[_junction_key(w.p2)].append(Point(w.p1.x - w.p2.x, w.p1.y - w.p2.y))
        self._arms = {key: directions for key, directions in arms.items() if len(directions) > 1}

    def __len__(self) -> int:
        return len(self.walls)

    def candidates(self, p: Point, q: Point, pad: float = VISIBILITY_PAD) -> List[WallSegment]:
        """Walls whose envelope meets the padded bounding box of ``pq``, in input order."""
        if self._tree is None:
            return []
        indices = self._tree.query(box(*segment_bbox(p, q, pad)))
        return [self.walls[i] for i in sorted(int(i) for i in indices)]

    def blocks(self, p: Point, q: Point) -> List[WallSegment]:
        """Walls properly crossed by the segment ``pq``."""
        return [w for w in self.candidates(p, q) if segments_cross(p, q, w.p1, w.p2)]

    def visible(self, p: Point, q: Point) -> bool:
        """True when ``pq`` has positive length and is not blocked by a wall.

        Besides proper crossings, a sight line is blocked where it slips
        through a junction of two walls: passing the junction with the walls
        on opposite sides, or leaving it into the corner they enclose.
        """
        if p.distance_to(q) < 1e-6:
            return False
        walls = self.candidates(p, q)
        if any(segments_cross(p, q, w.p1, w.p2) for w in walls):
            return False
        return not self._through_junction(p, q, walls)

    def _through_junction(self, p: Point, q: Point, walls: Sequence[WallSegment]) -> bool:
        if not self._arms:
            return False
        r = Point(q.x - p.x, q.y - p.y)
        checked = set()
        for vertex in (v for w in walls for v in (w.p1, w.p2)):
            key = _junction_key(vertex)
            if key in checked or key not in self._arms:
                continue
            checked.add(key)
            if point_segment_distance(vertex, p, q) > JUNCTION_EPSILON:
                continue
            pairs = combinations(self._arms[key], 2)
            if vertex.distance_to(p) <= JUNCTION_EPSILON:
                if any(_inside_corner(r, a, b) for a, b in pairs):
                    return True
            elif vertex.distance_to(q) <= JUNCTION_EPSILON:
                back = Point(-r.x, -r.y)
                if any(_inside_corner(back, a, b) for a, b in pairs):
                    return True
            elif any(cross(r, a) * cross(r, b) < 0 for a, b in pairs):
                return True
        return False

    def is_straight_joint(self, point: Point) -> bool:
        """True when ``point`` only joins collinear walls, so no shortest path bends there."""
        arms = self._arms.get(_junction_key(point))
        if not arms:
            return False
        return all(
            abs(cross(a, b)) <= CROSS_EPSILON * math.hypot(a.x, a.y) * math.hypot(b.x, b.y)
            for a, b in combinations(arms, 2)
        )

    def first_blocking(self, p: Point, q: Point) -> Optional[WallSegment]:
        """The wall hit first when walking from ``p`` towards ``q``.

        Hits need ``0 < t < 1`` along the walk and ``0 <= u <= 1`` along the wall.
        """
        r = Point(q.x - p.x, q.y - p.y)
        best_t = 1.0
        best = None
        for wall in self.candidates(p, q, pad=0.0):
            v = Point(wall.p2.x - wall.p1.x, wall.p2.y - wall.p1.y)
            denom = cross(r, v)
            if abs(denom) < CROSS_EPSILON:
                continue
            offset = Point(wall.p1.x - p.x, wall.p1.y - p.y)
            t = cross(offset, v) / denom
            u = cross(offset, r) / denom
            if 0.0 < t < best_t and 0.0 <= u <= 1.0:
                best_t = t
                best = wall
        return best

    def near(self, point: Point, distance: float) -> bool:
        """True when any wall lies within ``distance`` of ``point``."""
        if self._tree is None:
            return False
        hits = self._tree.query(ShapelyPoint(point.x, point.y), predicate="dwithin", distance=distance)
        return len(hits) > 0
