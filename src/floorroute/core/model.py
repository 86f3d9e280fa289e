"""Core data models for floorplan navigation.

This module defines the fundamental data structures used to represent
a scanned floorplan: points, affine transforms, walls, floor patches,
markers, room labels and the boxes derived from them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """Represents a 2D point in floorplan units.

    Attributes:
        x: The x-coordinate of the point.
        y: The y-coordinate of the point.
    """

    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class Transform:
    """2D affine transform ``(a, b, c, d, e, f)``.

    Maps ``(x, y)`` to ``(a*x + c*y + e, b*x + d*y + f)``. The default
    instance is the identity.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def translate(cls, tx: float, ty: float = 0.0) -> Transform:
        return cls(e=tx, f=ty)

    def compose(self, other: Transform) -> Transform:
        """Return ``self * other`` (``other`` is applied first)."""
        return Transform(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            e=self.a * other.e + self.c * other.f + self.e,
            f=self.b * other.e + self.d * other.f + self.f,
        )

    def apply(self, point: Point) -> Point:
        return Point(
            self.a * point.x + self.c * point.y + self.e,
            self.b * point.x + self.d * point.y + self.f,
        )


IDENTITY = Transform()


@dataclass(frozen=True)
class WallSegment:
    """Represents an undirected wall segment.

    Attributes:
        p1: First endpoint.
        p2: Second endpoint.
        source_kind: Primitive the wall came from (``rect``, ``line``,
            ``polyline``, ``path``, ``floor-rect``, ``floor-polygon``,
            ``floor-path``).
        stroke_color: Effective stroke color, lower-cased, or ``""``.
        stroke_width: Effective stroke width in local units.
    """

    p1: Point
    p2: Point
    source_kind: str = "line"
    stroke_color: str = ""
    stroke_width: float = 1.0

    @property
    def length(self) -> float:
        return self.p1.distance_to(self.p2)

    def key(self, scale: float = 2.0) -> tuple[tuple[int, int], tuple[int, int]]:
        """Endpoint-order-independent key on coordinates rounded at ``1/scale``."""
        a = (round(self.p1.x * scale), round(self.p1.y * scale))
        b = (round(self.p2.x * scale), round(self.p2.y * scale))
        return (a, b) if a <= b else (b, a)


@dataclass(frozen=True)
class FloorPatch:
    """Axis-aligned box of a floor-colored filled shape."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float
    source_kind: str = "rect"


@dataclass(frozen=True)
class EntranceMarker:
    """Building-level ingress point."""

    point: Point
    source_kind: str = "polygon"


@dataclass(frozen=True)
class DoorMarker:
    """Explicitly tagged door element.

    Attributes:
        point: Door position.
        id: Identifier attribute of the source element, if any.
        source_kind: Primitive the marker came from.
    """

    point: Point
    id: str | None = None
    source_kind: str = "rect"


@dataclass(frozen=True)
class CorridorMarker:
    """Corridor outline tagged in the drawing.

    Attributes:
        points: Transformed outline; rectangles are closed back to their
            first corner.
        id: Identifier attribute of the source element, if any.
        source_kind: Primitive the marker came from.
    """

    points: tuple[Point, ...]
    id: str | None = None
    source_kind: str = "rect"


@dataclass(frozen=True)
class RoomLabel:
    """A room code found in the drawing's text.

    Attributes:
        id: The label text, e.g. ``"A.1.34"``.
        point: Transformed text anchor.
    """

    id: str
    point: Point


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, point: Point, margin: float = 0.0) -> bool:
        return (
            self.min_x - margin <= point.x <= self.max_x + margin
            and self.min_y - margin <= point.y <= self.max_y + margin
        )

    def expanded(self, margin: float) -> Bounds:
        return Bounds(
            self.min_x - margin,
            self.min_y - margin,
            self.max_x + margin,
            self.max_y + margin,
        )

    def union(self, *others: Bounds) -> Bounds:
        """Smallest box containing this box and all of ``others``."""
        boxes = (self,) + others
        return Bounds(
            min(b.min_x for b in boxes),
            min(b.min_y for b in boxes),
            max(b.max_x for b in boxes),
            max(b.max_y for b in boxes),
        )

    @classmethod
    def around(cls, points) -> Bounds | None:
        """Smallest box containing all finite points, or ``None``."""
        xs = []
        ys = []
        for p in points:
            if p.is_finite():
                xs.append(p.x)
                ys.append(p.y)
        if not xs:
            return None
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class RoomBox:
    """Rectangular extent of a room inferred by ray casting.

    Attributes:
        id: Room label text.
        left: X of the nearest wall hit to the left.
        right: X of the nearest wall hit to the right.
        top: Y of the nearest wall hit upwards (smaller y).
        bottom: Y of the nearest wall hit downwards.
    """

    id: str
    left: float
    right: float
    top: float
    bottom: float

    def contains(self, point: Point) -> bool:
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom


@dataclass(frozen=True)
class RootFrame:
    """Declared coordinate box of the root ``<svg>`` element."""

    origin_x: float
    origin_y: float
    width: float
    height: float


@dataclass(frozen=True)
class DetectionResult:
    """Classified primitives of one floorplan.

    Attributes:
        walls: Wall segments, in source order.
        floors: Floor patches.
        entrances: Entrance markers.
        doors: Door markers.
        room_labels: Room labels.
        corridors: Corridor markers.
    """

    walls: tuple[WallSegment, ...] = ()
    floors: tuple[FloorPatch, ...] = ()
    entrances: tuple[EntranceMarker, ...] = ()
    doors: tuple[DoorMarker, ...] = ()
    room_labels: tuple[RoomLabel, ...] = ()
    corridors: tuple[CorridorMarker, ...] = ()


@dataclass(frozen=True)
class GeometryResult:
    """Building geometry derived from a detection result.

    Attributes:
        building_bounds: Building envelope, ``None`` when nothing usable exists.
        room_boxes: Boxes of labels whose four rays all hit a wall.
        filtered_walls: Walls near the envelope, deduplicated.
    """

    building_bounds: Bounds | None = None
    room_boxes: tuple[RoomBox, ...] = ()
    filtered_walls: tuple[WallSegment, ...] = ()
